"""Models SQLAlchemy do Força de Vendas."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def utc_now() -> datetime:
    """Retorna datetime atual em UTC."""
    return datetime.now(UTC)


def new_uuid() -> str:
    return str(uuid.uuid4())


# =============================================================================
# CADASTROS (somente leitura para a sincronização)
# =============================================================================

class SalesRep(Base):
    """Vendedor (representante comercial)."""

    __tablename__ = "sales_reps"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(Integer, unique=True, nullable=False, index=True)  # Código numérico usado no app
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=True)  # bcrypt; nulo = sem acesso ao app
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    customers = relationship("Customer", back_populates="sales_rep")
    routes = relationship("DeliveryRoute", back_populates="sales_rep")
    grants = relationship("SyncGrant", back_populates="sales_rep", cascade="all, delete-orphan")


class Customer(Base):
    """Cliente atendido por um vendedor."""

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=True)
    document = Column(String(20), nullable=True)  # CPF/CNPJ
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    neighborhood = Column(String(120), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(2), nullable=True)
    zip = Column(String(10), nullable=True)
    notes = Column(Text, nullable=True)

    # Roteiro de visitas
    visit_days = Column(JSON, nullable=True)  # ["segunda", "quarta"]
    visit_frequency = Column(String(30), nullable=True)
    visit_sequence = Column(Integer, nullable=True)

    sales_rep_id = Column(String(36), ForeignKey("sales_reps.id", ondelete="SET NULL"), nullable=True, index=True)
    delivery_route_id = Column(String(36), ForeignKey("delivery_routes.id", ondelete="SET NULL"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    sales_rep = relationship("SalesRep", back_populates="customers")

    __table_args__ = (
        Index("ix_customers_rep_active", "sales_rep_id", "active"),
    )


class Unit(Base):
    """Unidade de medida (UN, CX, KG...)."""

    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(String(10), unique=True, nullable=False)
    description = Column(String(100), nullable=True)
    package_quantity = Column(Integer, nullable=True)


class Product(Base):
    """Produto do catálogo."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cost = Column(Float, default=0.0)
    sale_price = Column(Float, default=0.0)
    max_discount_percent = Column(Float, default=0.0)
    stock = Column(Float, default=0.0)

    main_unit_id = Column(String(36), ForeignKey("units.id", ondelete="SET NULL"), nullable=True)
    sub_unit_id = Column(String(36), ForeignKey("units.id", ondelete="SET NULL"), nullable=True)
    subunit_ratio = Column(Float, nullable=True)

    category_id = Column(String(36), nullable=True)
    group_id = Column(String(36), nullable=True)
    brand_id = Column(String(36), nullable=True)

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    main_unit = relationship("Unit", foreign_keys=[main_unit_id])
    sub_unit = relationship("Unit", foreign_keys=[sub_unit_id])


class DeliveryRoute(Base):
    """Rota de entrega/visita de um vendedor."""

    __tablename__ = "delivery_routes"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(120), nullable=False)
    description = Column(String(255), nullable=True)
    sales_rep_id = Column(String(36), ForeignKey("sales_reps.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String(20), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    sales_rep = relationship("SalesRep", back_populates="routes")


class PaymentTable(Base):
    """Tabela de pagamento/preço (prazos e parcelas)."""

    __tablename__ = "payment_tables"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(120), nullable=False)
    description = Column(String(255), nullable=True)
    type = Column(String(30), nullable=True)  # boleto, promissoria, cheque...
    terms = Column(JSON, nullable=True)
    installments = Column(JSON, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


# =============================================================================
# PEDIDOS
# =============================================================================

class Order(Base):
    """Pedido no sistema central.

    `code` e `mobile_order_id` são identidades alternativas do mesmo documento;
    as constraints únicas garantem a importação exatamente uma vez mesmo com
    uploads concorrentes.
    """

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(Integer, nullable=False)
    mobile_order_id = Column(String(100), nullable=True)

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)
    sales_rep_id = Column(String(36), ForeignKey("sales_reps.id"), nullable=True, index=True)
    sales_rep_name = Column(String(255), nullable=True)

    date = Column(DateTime(timezone=True), default=utc_now)
    due_date = Column(DateTime(timezone=True), nullable=True)
    delivery_date = Column(DateTime(timezone=True), nullable=True)

    total = Column(Float, default=0.0)
    discount = Column(Float, default=0.0)
    status = Column(String(20), default="pending")
    payment_status = Column(String(20), default="pending")
    payment_method = Column(String(100), nullable=True)
    payment_method_id = Column(String(36), nullable=True)
    payment_table_id = Column(String(36), nullable=True)

    notes = Column(Text, nullable=True)
    delivery_address = Column(String(255), nullable=True)
    delivery_city = Column(String(120), nullable=True)
    delivery_state = Column(String(2), nullable=True)
    delivery_zip = Column(String(10), nullable=True)
    rejection_reason = Column(String(255), nullable=True)
    visit_notes = Column(Text, nullable=True)

    source_project = Column(String(20), default="desktop")  # desktop | mobile
    sync_status = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("code", name="uq_orders_code"),
        UniqueConstraint("mobile_order_id", name="uq_orders_mobile_order_id"),
        Index("ix_orders_rep_created", "sales_rep_id", "created_at"),
    )


class OrderItem(Base):
    """Item de pedido."""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), nullable=True)
    product_name = Column(String(255), nullable=True)
    product_code = Column(Integer, nullable=True)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    price = Column(Float, nullable=True)
    discount = Column(Float, default=0.0)
    total = Column(Float, default=0.0)
    unit = Column(String(10), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # Relationships
    order = relationship("Order", back_populates="items")


class OrderCodeCounter(Base):
    """Contador atômico de códigos de pedido."""

    __tablename__ = "order_code_counters"

    name = Column(String(30), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)


# =============================================================================
# SINCRONIZAÇÃO MOBILE
# =============================================================================

class SyncGrant(Base):
    """Autorização de sincronização de um dispositivo (token Bearer)."""

    __tablename__ = "sync_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token_hash = Column(String(64), unique=True, nullable=False)  # SHA-256 do token
    sales_rep_id = Column(String(36), ForeignKey("sales_reps.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=True)  # Ex: "Mobile App - 19/10/2026"
    device_id = Column(String(255), nullable=True)
    device_ip = Column(String(45), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # Relationships
    sales_rep = relationship("SalesRep", back_populates="grants")

    __table_args__ = (
        Index("ix_sync_tokens_rep_active", "sales_rep_id", "active"),
    )


class SyncLog(Base):
    """Histórico de sincronização (somente inclusão)."""

    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, index=True)
    sales_rep_id = Column(String(36), nullable=True, index=True)
    event_type = Column(String(20), nullable=False)  # upload | download | error
    data_type = Column(String(50), nullable=False)  # orders | primeira_sincronizacao
    records_count = Column(Integer, default=0)
    status = Column(String(20), nullable=False)  # completed | partial | failed
    error_message = Column(Text, nullable=True)
    details = Column("metadata", JSON, nullable=True)
    device_id = Column(String(255), nullable=True)
    device_ip = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)

    __table_args__ = (
        Index("ix_sync_logs_rep_created", "sales_rep_id", "created_at"),
    )
