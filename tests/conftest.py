"""Configuração de fixtures para testes."""

import os
from datetime import UTC, datetime, timedelta

# Precisa vir antes de importar o pacote: as configurações são lidas no import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import bcrypt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from forcavendas.database import Base, get_db
from forcavendas.main import app
from forcavendas.models import (
    Customer,
    DeliveryRoute,
    Order,
    PaymentTable,
    Product,
    SalesRep,
    SyncGrant,
    Unit,
)
from forcavendas.services.credential_gate import hash_token


# Banco de dados em memória para testes
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SALES_REP_PASSWORD = "senha123"
VALID_TOKEN = "token-valido-do-vendedor"
EXPIRED_TOKEN = "token-expirado-do-vendedor"
REVOKED_TOKEN = "token-revogado-do-vendedor"


@pytest.fixture(scope="function")
def db_session():
    """Cria uma sessão de banco de dados para testes."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Cria um cliente de teste com banco de dados isolado."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# CADASTROS
# =============================================================================

@pytest.fixture
def sales_rep(db_session):
    """Vendedor ativo (código 101) com senha de acesso ao app."""
    rep = SalesRep(
        code=101,
        name="Ana Souza",
        email="ana@exemplo.com.br",
        phone="91999990000",
        # Custo baixo para não pesar nos testes
        password_hash=bcrypt.hashpw(SALES_REP_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode(),
        active=True,
    )
    db_session.add(rep)
    db_session.commit()
    return rep


@pytest.fixture
def inactive_sales_rep(db_session):
    """Vendedor desligado (código 202)."""
    rep = SalesRep(code=202, name="Bruno Lima", active=False)
    db_session.add(rep)
    db_session.commit()
    return rep


@pytest.fixture
def customer(db_session, sales_rep):
    """Cliente "C1" atendido pelo vendedor 101."""
    c = Customer(
        id="C1",
        code=1,
        name="Mercearia Central",
        company_name="Mercearia Central LTDA",
        city="Belém",
        state="PA",
        visit_days=["segunda", "quinta"],
        visit_sequence=1,
        sales_rep_id=sales_rep.id,
        active=True,
    )
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def catalog(db_session, sales_rep, customer):
    """Produtos, rotas e tabelas de pagamento para a primeira sincronização."""
    un = Unit(code="UN", description="Unidade")
    cx = Unit(code="CX", description="Caixa", package_quantity=12)
    db_session.add_all([un, cx])
    db_session.flush()

    db_session.add_all([
        Product(code=20, name="Feijão 1kg", sale_price=8.5, stock=40, main_unit_id=un.id),
        Product(
            code=10,
            name="Arroz 5kg",
            sale_price=25.9,
            stock=100,
            main_unit_id=cx.id,
            sub_unit_id=un.id,
            subunit_ratio=12,
        ),
        Product(code=30, name="Produto fora de linha", active=False),
        Customer(id="C2", code=2, name="Açougue do Zé", sales_rep_id=sales_rep.id, active=False),
        Customer(id="C3", code=3, name="Bar da Esquina", sales_rep_id=sales_rep.id),
        Customer(id="C9", code=9, name="Cliente de outro vendedor"),
        DeliveryRoute(name="Rota Centro", sales_rep_id=sales_rep.id, status="ativa"),
        DeliveryRoute(name="Rota Antiga", sales_rep_id=sales_rep.id, active=False),
        PaymentTable(name="À vista", type="dinheiro", terms=[0], installments=1),
        PaymentTable(name="30/60", type="boleto", terms=[30, 60], installments=2),
        PaymentTable(name="Descontinuada", active=False),
    ])
    db_session.commit()


# =============================================================================
# AUTORIZAÇÕES DE SINCRONIZAÇÃO
# =============================================================================

def _grant(sales_rep_id, token, active=True, expires_in=timedelta(days=30)):
    return SyncGrant(
        token_hash=hash_token(token),
        sales_rep_id=sales_rep_id,
        name="Mobile App - teste",
        active=active,
        expires_at=datetime.now(UTC) + expires_in,
    )


@pytest.fixture
def valid_token(db_session, sales_rep):
    db_session.add(_grant(sales_rep.id, VALID_TOKEN))
    db_session.commit()
    return VALID_TOKEN


@pytest.fixture
def expired_token(db_session, sales_rep):
    db_session.add(_grant(sales_rep.id, EXPIRED_TOKEN, expires_in=timedelta(minutes=-1)))
    db_session.commit()
    return EXPIRED_TOKEN


@pytest.fixture
def revoked_token(db_session, sales_rep):
    db_session.add(_grant(sales_rep.id, REVOKED_TOKEN, active=False))
    db_session.commit()
    return REVOKED_TOKEN


@pytest.fixture
def auth_headers(valid_token):
    return {"Authorization": f"Bearer {valid_token}"}


# =============================================================================
# PEDIDOS
# =============================================================================

@pytest.fixture
def make_order():
    """Monta um pedido no formato enviado pelo app (camelCase)."""

    def _make(code=None, mobile_order_id=None, customer_id="C1", items=None, **extra):
        order = {
            "customerId": customer_id,
            "customerName": "Nome digitado no app",
            "total": 51.8,
            "paymentMethod": "Dinheiro",
            "items": items if items is not None else [
                {"productId": "P1", "productName": "Arroz 5kg", "productCode": 10, "quantity": 2, "unitPrice": 25.9, "total": 51.8},
            ],
        }
        if code is not None:
            order["code"] = code
        if mobile_order_id is not None:
            order["mobileOrderId"] = mobile_order_id
        order.update(extra)
        return order

    return _make


@pytest.fixture
def existing_order(db_session, sales_rep, customer):
    """Pedido já importado: código 500, id do dispositivo "M1"."""
    order = Order(
        code=500,
        mobile_order_id="M1",
        customer_id=customer.id,
        customer_name=customer.name,
        sales_rep_id=sales_rep.id,
        sales_rep_name=sales_rep.name,
        total=10.0,
        source_project="mobile",
    )
    db_session.add(order)
    db_session.commit()
    return order
