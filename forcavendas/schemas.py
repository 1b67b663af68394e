"""Schemas Pydantic para validação e serialização."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# === Enums ===


class SyncEventType(str, Enum):
    """Tipos de evento do histórico de sincronização."""

    UPLOAD = "upload"
    DOWNLOAD = "download"
    ERROR = "error"


class SyncStatus(str, Enum):
    """Resultado de um evento de sincronização."""

    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class ImportOutcome(str, Enum):
    """Estado final de um pedido dentro de um lote."""

    IMPORTED = "imported"
    REJECTED_DUPLICATE = "rejected-duplicate"
    REJECTED_INVALID = "rejected-invalid"
    REJECTED_WRITE_ERROR = "rejected-write-error"


class RejectionReason(str, Enum):
    """Motivos de rejeição de um pedido (reportados ao dispositivo)."""

    MALFORMED_ORDER = "MalformedOrder"
    CUSTOMER_NOT_FOUND = "CustomerNotFound"
    EMPTY_ORDER = "EmptyOrder"
    INVALID_ITEM = "InvalidItem"
    SALES_REP_INACTIVE = "SalesRepInactive"
    DUPLICATE_ORDER = "DuplicateOrder"
    WRITE_ERROR = "WriteError"


# === Payload do dispositivo ===


class InboundModel(BaseModel):
    """Base dos payloads vindos do app: camelCase, imutáveis, campos extras ignorados."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class InboundOrderItem(InboundModel):
    """Item de pedido enviado pelo app."""

    product_id: str | None = None
    product_name: str = ""
    product_code: int | None = None
    quantity: float = 0.0
    unit_price: float | None = None
    price: float | None = None
    discount: float = 0.0
    total: float = 0.0
    unit: str | None = None

    @property
    def effective_unit_price(self) -> float | None:
        """Preço unitário; versões antigas do app enviam apenas `price`."""
        if self.unit_price is not None:
            return self.unit_price
        return self.price


class InboundOrder(InboundModel):
    """Pedido capturado offline no app."""

    code: int | None = None
    mobile_order_id: str | None = None

    customer_id: str | None = None
    customer_name: str | None = None
    # Informativos: a atribuição vem sempre da credencial
    sales_rep_id: str | None = None
    sales_rep_name: str | None = None

    date: datetime | None = None
    due_date: datetime | None = None
    delivery_date: datetime | None = None

    items: list[InboundOrderItem] = Field(default_factory=list)
    total: float = 0.0
    discount: float = 0.0
    status: str = "pending"
    payment_status: str = "pending"
    payment_method: str | None = None
    payment_method_id: str | None = None
    payment_table_id: str | None = None

    notes: str | None = None
    delivery_address: str | None = None
    delivery_city: str | None = None
    delivery_state: str | None = None
    delivery_zip: str | None = None
    rejection_reason: str | None = None
    visit_notes: str | None = None

    @field_validator("mobile_order_id")
    @classmethod
    def normalize_mobile_order_id(cls, v: str | None) -> str | None:
        """Id em branco equivale a pedido sem id do dispositivo."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def identifier(self) -> str | None:
        """Identificador do pedido para mensagens (código ou id do dispositivo)."""
        if self.code is not None:
            return str(self.code)
        return self.mobile_order_id


# === Respostas da importação ===


class OrderRejectionOut(BaseModel):
    """Detalhe de um pedido rejeitado."""

    order: str
    outcome: ImportOutcome
    reason: RejectionReason
    detail: str | None = None


class ImportResults(BaseModel):
    imported: int
    failed: int
    errors: list[str]
    rejections: list[OrderRejectionOut] = Field(default_factory=list)


class ImportResponse(BaseModel):
    """Resposta de um upload de pedidos. `success` indica que o lote foi processado."""

    success: bool = True
    message: str
    results: ImportResults


# === Autenticação do app ===


class MobileLoginRequest(BaseModel):
    """Login do vendedor no app (código + senha)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sales_rep_code: int = Field(..., gt=0)
    password: str = Field(..., min_length=1)
    device_id: str | None = Field(default=None, max_length=255)


class SalesRepOut(BaseModel):
    id: str
    code: int
    name: str
    email: str | None = None
    phone: str | None = None
    active: bool

    model_config = ConfigDict(from_attributes=True)


class MobileLoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    sales_rep: SalesRepOut = Field(..., alias="salesRep")
    message: str


# === Histórico de sincronização ===


class SyncLogOut(BaseModel):
    id: int
    sales_rep_id: str | None = None
    event_type: str
    data_type: str
    records_count: int
    status: str
    error_message: str | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="details")
    device_id: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SyncLogClearResponse(BaseModel):
    deleted: int


# === Primeira sincronização (snapshot) ===


class SnapshotSalesRep(BaseModel):
    id: str
    codigo: int
    nome: str
    email: str = ""
    telefone: str = ""


class SnapshotProduct(BaseModel):
    id: str
    codigo: int
    nome: str
    descricao: str = ""
    custo: float = 0.0
    preco: float = 0.0
    estoque: float = 0.0
    desconto_maximo_percent: float = 0.0
    unidade: str = "UN"
    unidade_descricao: str | None = None
    sub_unidade: str | None = None
    sub_unidade_descricao: str | None = None
    fator_sub_unidade: float | None = None
    categoria_id: str | None = None
    grupo_id: str | None = None
    marca_id: str | None = None


class SnapshotCustomer(BaseModel):
    id: str
    codigo: int
    nome: str
    nome_empresa: str = ""
    documento: str = ""
    telefone: str = ""
    email: str = ""
    endereco: str = ""
    bairro: str = ""
    cidade: str = ""
    estado: str = ""
    cep: str = ""
    observacoes: str = ""
    dias_visita: list[str] = Field(default_factory=list)
    frequencia_visita: str = ""
    sequencia_visita: int = 0
    vendedor_id: str | None = None
    rota_entrega_id: str | None = None


class SnapshotRoute(BaseModel):
    id: str
    nome: str
    descricao: str = ""
    status: str | None = None


class SnapshotPaymentTable(BaseModel):
    id: str
    nome: str
    descricao: str = ""
    tipo: str | None = None
    prazos: Any = None
    parcelas: Any = None


class DeviceSnapshot(BaseModel):
    """Dados necessários para o app operar offline."""

    vendedor: SnapshotSalesRep
    produtos: list[SnapshotProduct]
    clientes: list[SnapshotCustomer]
    rotas: list[SnapshotRoute]
    tabelas_preco: list[SnapshotPaymentTable]
    timestamp: datetime
    versao: str


# === Health ===


class HealthResponse(BaseModel):
    """Response do health check."""

    status: str
    db: bool
