"""Montagem dos dados da primeira sincronização do app."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import SalesRepNotFoundError
from ..models import Customer, DeliveryRoute, PaymentTable, Product, utc_now
from ..schemas import (
    DeviceSnapshot,
    SnapshotCustomer,
    SnapshotPaymentTable,
    SnapshotProduct,
    SnapshotRoute,
    SnapshotSalesRep,
    SyncEventType,
    SyncStatus,
)
from .credential_gate import SalesRepIdentity
from .order_store import OrderStore
from .sync_log import SyncLogService

module_logger = logging.getLogger(__name__)

DATA_TYPE_FIRST_SYNC = "primeira_sincronizacao"


def _product_out(p: Product) -> SnapshotProduct:
    return SnapshotProduct(
        id=p.id,
        codigo=p.code,
        nome=p.name,
        descricao=p.description or "",
        custo=p.cost or 0.0,
        preco=p.sale_price or 0.0,
        estoque=p.stock or 0.0,
        desconto_maximo_percent=p.max_discount_percent or 0.0,
        unidade=p.main_unit.code if p.main_unit else "UN",
        unidade_descricao=p.main_unit.description if p.main_unit else None,
        sub_unidade=p.sub_unit.code if p.sub_unit else None,
        sub_unidade_descricao=p.sub_unit.description if p.sub_unit else None,
        fator_sub_unidade=p.subunit_ratio,
        categoria_id=p.category_id,
        grupo_id=p.group_id,
        marca_id=p.brand_id,
    )


def _customer_out(c: Customer) -> SnapshotCustomer:
    return SnapshotCustomer(
        id=c.id,
        codigo=c.code,
        nome=c.name,
        nome_empresa=c.company_name or "",
        documento=c.document or "",
        telefone=c.phone or "",
        email=c.email or "",
        endereco=c.address or "",
        bairro=c.neighborhood or "",
        cidade=c.city or "",
        estado=c.state or "",
        cep=c.zip or "",
        observacoes=c.notes or "",
        dias_visita=c.visit_days or [],
        frequencia_visita=c.visit_frequency or "",
        sequencia_visita=c.visit_sequence or 0,
        vendedor_id=c.sales_rep_id,
        rota_entrega_id=c.delivery_route_id,
    )


class SnapshotBuilder:
    """Gera o pacote que o dispositivo precisa antes de operar offline."""

    def __init__(
        self,
        db: Session,
        logger: Optional[logging.Logger] = None,
        sync_log: Optional[SyncLogService] = None,
        store: Optional[OrderStore] = None,
    ):
        self.db = db
        self.logger = logger or module_logger
        self.store = store or OrderStore(db)
        self.sync_log = sync_log or SyncLogService(db, logger=self.logger)

    def build(self, identity: SalesRepIdentity) -> DeviceSnapshot:
        # A autorização pode ter sobrevivido ao cadastro do vendedor
        rep = self.store.get_sales_rep(identity.id)
        if not rep or not rep.active:
            self.logger.info("Snapshot negado: vendedor %s não encontrado ou inativo", identity.code)
            exc = SalesRepNotFoundError()
            self.sync_log.append(
                SyncEventType.ERROR,
                DATA_TYPE_FIRST_SYNC,
                SyncStatus.FAILED,
                sales_rep_id=identity.id,
                error_message=exc.message,
            )
            raise exc

        products = self.store.list_active_products()
        customers = (
            self.db.query(Customer)
            .filter(Customer.sales_rep_id == rep.id, Customer.active == True)
            .order_by(Customer.name)
            .all()
        )
        routes = (
            self.db.query(DeliveryRoute)
            .filter(DeliveryRoute.sales_rep_id == rep.id, DeliveryRoute.active == True)
            .order_by(DeliveryRoute.name)
            .all()
        )
        payment_tables = (
            self.db.query(PaymentTable)
            .filter(PaymentTable.active == True)
            .order_by(PaymentTable.name)
            .all()
        )

        snapshot = DeviceSnapshot(
            vendedor=SnapshotSalesRep(
                id=rep.id,
                codigo=rep.code,
                nome=rep.name,
                email=rep.email or "",
                telefone=rep.phone or "",
            ),
            produtos=[_product_out(p) for p in products],
            clientes=[_customer_out(c) for c in customers],
            rotas=[
                SnapshotRoute(id=r.id, nome=r.name, descricao=r.description or "", status=r.status)
                for r in routes
            ],
            tabelas_preco=[
                SnapshotPaymentTable(
                    id=t.id,
                    nome=t.name,
                    descricao=t.description or "",
                    tipo=t.type,
                    prazos=t.terms,
                    parcelas=t.installments,
                )
                for t in payment_tables
            ],
            timestamp=utc_now(),
            versao=settings.snapshot_version,
        )

        self.sync_log.append(
            SyncEventType.DOWNLOAD,
            DATA_TYPE_FIRST_SYNC,
            SyncStatus.COMPLETED,
            records_count=len(snapshot.produtos) + len(snapshot.clientes),
            sales_rep_id=rep.id,
            metadata={
                "produtos_count": len(snapshot.produtos),
                "clientes_count": len(snapshot.clientes),
                "rotas_count": len(snapshot.rotas),
                "tabelas_count": len(snapshot.tabelas_preco),
            },
        )

        self.logger.info(
            "Snapshot gerado para vendedor %s: %s produtos, %s clientes",
            rep.code, len(snapshot.produtos), len(snapshot.clientes),
        )
        return snapshot
