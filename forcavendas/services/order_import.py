"""Importação de lotes de pedidos enviados pelo app do vendedor.

Cada pedido do lote segue, em sequência e na ordem recebida:

1. conversão do payload para ``InboundOrder``
2. validação referencial (cliente, itens, vendedor)
3. deduplicação por código ou id do dispositivo
4. inclusão do cabeçalho (com código sequencial quando o app não envia um)
5. inclusão dos itens; se falhar, o cabeçalho é removido

O destino de um pedido nunca afeta os demais e o lote não é desfeito como um
todo. Ao final é registrado exatamente um evento no histórico de sincronização.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import MalformedRequestError, SyncError
from ..models import utc_now
from ..schemas import (
    ImportOutcome,
    ImportResponse,
    ImportResults,
    InboundOrder,
    InboundOrderItem,
    OrderRejectionOut,
    RejectionReason,
    SyncEventType,
    SyncStatus,
)
from .credential_gate import Credential, CredentialGate, SalesRepIdentity
from .deduplication import Deduplicator
from .order_store import OrderStore
from .order_validation import ReferentialValidator, ValidationResult
from .sync_log import SyncLogService

module_logger = logging.getLogger(__name__)

DATA_TYPE_ORDERS = "orders"


@dataclass
class OrderResult:
    """Destino de um pedido do lote."""

    index: int
    order: str
    outcome: ImportOutcome
    reason: Optional[RejectionReason] = None
    detail: Optional[str] = None
    order_id: Optional[str] = None
    code: Optional[int] = None

    @property
    def imported(self) -> bool:
        return self.outcome == ImportOutcome.IMPORTED

    @property
    def error_message(self) -> str:
        return f"{self.order}: {self.reason.value if self.reason else ''}"


@dataclass
class BatchResult:
    """Resultado consolidado de um lote."""

    sales_rep: SalesRepIdentity
    results: list[OrderResult] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return sum(1 for r in self.results if r.imported)

    @property
    def failed_count(self) -> int:
        return len(self.results) - self.imported_count

    @property
    def per_order_errors(self) -> list[OrderResult]:
        return [r for r in self.results if not r.imported]

    @property
    def errors(self) -> list[str]:
        return [r.error_message for r in self.per_order_errors]

    @property
    def message(self) -> str:
        return f"{self.imported_count} pedidos importados, {self.failed_count} com falha"

    def to_response(self) -> ImportResponse:
        return ImportResponse(
            success=True,
            message=self.message,
            results=ImportResults(
                imported=self.imported_count,
                failed=self.failed_count,
                errors=self.errors,
                rejections=[
                    OrderRejectionOut(order=r.order, outcome=r.outcome, reason=r.reason, detail=r.detail)
                    for r in self.per_order_errors
                ],
            ),
        )


def _db_error_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc).strip()[:300]


def _validation_error_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return "; ".join(parts)


def _raw_identifier(raw: Any) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    if raw.get("code") is not None:
        return str(raw["code"])
    for key in ("mobileOrderId", "mobile_order_id"):
        value = raw.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


class BatchImporter:
    """Orquestra a importação de um lote de pedidos."""

    def __init__(
        self,
        db: Session,
        logger: Optional[logging.Logger] = None,
        store: Optional[OrderStore] = None,
        gate: Optional[CredentialGate] = None,
        sync_log: Optional[SyncLogService] = None,
    ):
        self.db = db
        self.logger = logger or module_logger
        self.store = store or OrderStore(db)
        self.gate = gate or CredentialGate(db, logger=self.logger)
        self.validator = ReferentialValidator(self.store, logger=self.logger)
        self.deduplicator = Deduplicator(self.store)
        self.sync_log = sync_log or SyncLogService(db, logger=self.logger)

    def import_batch(
        self,
        credential: Optional[Credential],
        orders: Any,
        device_id: Optional[str] = None,
        device_ip: Optional[str] = None,
    ) -> BatchResult:
        """
        Importa um lote de pedidos.

        Raises:
            UnauthorizedError / SalesRepNotFoundError: credencial rejeitada
            MalformedRequestError: lote ausente, vazio ou que não é uma lista
        """
        try:
            identity = self.gate.authenticate(credential)
        except SyncError as exc:
            self.sync_log.append(
                SyncEventType.ERROR,
                DATA_TYPE_ORDERS,
                SyncStatus.FAILED,
                error_message=exc.message,
                device_id=device_id,
                device_ip=device_ip,
            )
            raise

        try:
            raw_orders = self._unwrap(orders)
        except MalformedRequestError as exc:
            self.sync_log.append(
                SyncEventType.ERROR,
                DATA_TYPE_ORDERS,
                SyncStatus.FAILED,
                sales_rep_id=identity.id,
                error_message=exc.message,
                device_id=device_id,
                device_ip=device_ip,
            )
            raise

        self.logger.info("Importando %s pedidos do vendedor %s (%s)", len(raw_orders), identity.code, identity.name)

        batch = BatchResult(sales_rep=identity)
        for index, raw in enumerate(raw_orders):
            result = self._import_one(index, raw, identity)
            batch.results.append(result)
            if result.imported:
                self.logger.info("Pedido %s importado com código %s", result.order, result.code)
            else:
                self.logger.warning(
                    "Pedido %s rejeitado (%s): %s", result.order, result.reason.value, result.detail
                )

        self.sync_log.append(
            SyncEventType.UPLOAD,
            DATA_TYPE_ORDERS,
            SyncStatus.COMPLETED if batch.failed_count == 0 else SyncStatus.PARTIAL,
            records_count=batch.imported_count,
            sales_rep_id=identity.id,
            error_message=f"{batch.failed_count} pedidos falharam na importação" if batch.failed_count else None,
            metadata={
                "total_orders": len(raw_orders),
                "imported": batch.imported_count,
                "failed": batch.failed_count,
                "errors": batch.errors,
            },
            device_id=device_id,
            device_ip=device_ip,
        )

        self.logger.info(
            "Lote do vendedor %s: %s importados, %s com falha",
            identity.code, batch.imported_count, batch.failed_count,
        )
        return batch

    def _unwrap(self, orders: Any) -> Sequence[Any]:
        if not isinstance(orders, (list, tuple)):
            raise MalformedRequestError("Formato inválido: esperado array de pedidos")
        if not orders:
            raise MalformedRequestError("Nenhum pedido informado")
        if len(orders) > settings.max_batch_size:
            raise MalformedRequestError(f"Lote excede o limite de {settings.max_batch_size} pedidos")
        return orders

    # -------------------------------------------------------------------------
    # Pedido individual
    # -------------------------------------------------------------------------

    def _import_one(self, index: int, raw: Any, identity: SalesRepIdentity) -> OrderResult:
        label = f"#{index + 1}"

        if isinstance(raw, InboundOrder):
            order = raw
        else:
            try:
                order = InboundOrder.model_validate(raw)
            except ValidationError as exc:
                return OrderResult(
                    index,
                    _raw_identifier(raw) or label,
                    ImportOutcome.REJECTED_INVALID,
                    RejectionReason.MALFORMED_ORDER,
                    _validation_error_message(exc),
                )

        label = order.identifier or label

        validation = self.validator.validate(order, identity.id)
        if not validation.ok:
            return OrderResult(index, label, ImportOutcome.REJECTED_INVALID, validation.reason, validation.detail)

        if self.deduplicator.is_duplicate(order):
            return self._duplicate(index, label, "Pedido já importado")

        try:
            code = order.code if order.code is not None else self.store.next_order_code()
            header = self.store.insert_order(self._order_values(order, code, validation, identity))
            order_id = header.id
        except IntegrityError as exc:
            self.db.rollback()
            # Outra sincronização concorrente venceu a corrida pela mesma chave
            if self.deduplicator.is_duplicate(order):
                return self._duplicate(index, label, "Pedido importado por outra sincronização")
            return self._write_error(index, label, f"Falha ao incluir pedido: {_db_error_message(exc)}")
        except SQLAlchemyError as exc:
            self.db.rollback()
            return self._write_error(index, label, f"Falha ao incluir pedido: {_db_error_message(exc)}")

        try:
            self.store.insert_items(order_id, [self._item_values(item) for item in order.items])
        except SQLAlchemyError as exc:
            self.db.rollback()
            self._compensate(order_id, label)
            return self._write_error(index, label, f"Falha ao incluir itens do pedido: {_db_error_message(exc)}")

        return OrderResult(index, label, ImportOutcome.IMPORTED, order_id=order_id, code=code)

    def _compensate(self, order_id: str, label: str) -> None:
        """Remove o cabeçalho cujos itens não puderam ser gravados."""
        try:
            self.store.delete_order(order_id)
        except SQLAlchemyError:
            self.db.rollback()
            self.logger.exception(
                "Não foi possível remover o pedido %s (%s) após falha na inclusão dos itens", order_id, label
            )

    @staticmethod
    def _duplicate(index: int, label: str, detail: str) -> OrderResult:
        return OrderResult(
            index, label, ImportOutcome.REJECTED_DUPLICATE, RejectionReason.DUPLICATE_ORDER, detail
        )

    @staticmethod
    def _write_error(index: int, label: str, detail: str) -> OrderResult:
        return OrderResult(
            index, label, ImportOutcome.REJECTED_WRITE_ERROR, RejectionReason.WRITE_ERROR, detail
        )

    @staticmethod
    def _order_values(
        order: InboundOrder,
        code: int,
        validation: ValidationResult,
        identity: SalesRepIdentity,
    ) -> dict[str, Any]:
        # Nomes vêm dos cadastros, nunca do payload
        return {
            "code": code,
            "mobile_order_id": order.mobile_order_id,
            "customer_id": validation.customer.id,
            "customer_name": validation.customer.name,
            "sales_rep_id": identity.id,
            "sales_rep_name": validation.sales_rep.name,
            "date": order.date or utc_now(),
            "due_date": order.due_date,
            "delivery_date": order.delivery_date,
            "total": order.total or 0.0,
            "discount": order.discount or 0.0,
            "status": order.status or "pending",
            "payment_status": order.payment_status or "pending",
            "payment_method": order.payment_method or "",
            "payment_method_id": order.payment_method_id,
            "payment_table_id": order.payment_table_id,
            "notes": order.notes or "",
            "delivery_address": order.delivery_address or "",
            "delivery_city": order.delivery_city or "",
            "delivery_state": order.delivery_state or "",
            "delivery_zip": order.delivery_zip or "",
            "rejection_reason": order.rejection_reason,
            "visit_notes": order.visit_notes,
            "source_project": "mobile",
            "sync_status": "synced",
        }

    @staticmethod
    def _item_values(item: InboundOrderItem) -> dict[str, Any]:
        unit_price = item.effective_unit_price
        return {
            "product_id": item.product_id,
            "product_name": item.product_name,
            "product_code": item.product_code,
            "quantity": item.quantity,
            "unit_price": unit_price,
            "price": item.price if item.price is not None else unit_price,
            "discount": item.discount or 0.0,
            "total": item.total,
            "unit": item.unit,
        }
