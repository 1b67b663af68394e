"""Validação referencial de pedidos vindos do app."""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..models import Customer, SalesRep
from ..schemas import InboundOrder, RejectionReason
from .order_store import OrderStore

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[RejectionReason] = None
    detail: Optional[str] = None
    customer: Optional[Customer] = None
    sales_rep: Optional[SalesRep] = None

    @classmethod
    def fail(cls, reason: RejectionReason, detail: str) -> "ValidationResult":
        return cls(ok=False, reason=reason, detail=detail)


class ReferentialValidator:
    """Confere um pedido isolado contra os cadastros do sistema central.

    As verificações param na primeira falha, nesta ordem: cliente, itens
    presentes, cada item, vendedor ativo. Nunca consulta outros pedidos do lote.
    """

    def __init__(self, store: OrderStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or module_logger

    def validate(self, order: InboundOrder, sales_rep_id: str) -> ValidationResult:
        customer = self.store.get_customer(order.customer_id) if order.customer_id else None
        if customer is None or not customer.active:
            return ValidationResult.fail(
                RejectionReason.CUSTOMER_NOT_FOUND,
                f"Cliente não encontrado: {order.customer_id}",
            )

        if not order.items:
            return ValidationResult.fail(RejectionReason.EMPTY_ORDER, "Pedido sem itens")

        for index, item in enumerate(order.items):
            if not (math.isfinite(item.quantity) and item.quantity > 0):
                return ValidationResult.fail(
                    RejectionReason.INVALID_ITEM,
                    f"Item {index + 1}: quantidade deve ser maior que zero",
                )
            unit_price = item.effective_unit_price
            if unit_price is None or not (math.isfinite(unit_price) and unit_price >= 0):
                return ValidationResult.fail(
                    RejectionReason.INVALID_ITEM,
                    f"Item {index + 1}: preço unitário deve ser maior ou igual a zero",
                )

        sales_rep = self.store.get_sales_rep(sales_rep_id)
        if sales_rep is None or not sales_rep.active:
            return ValidationResult.fail(
                RejectionReason.SALES_REP_INACTIVE,
                f"Vendedor inativo: {sales_rep_id}",
            )

        return ValidationResult(ok=True, customer=customer, sales_rep=sales_rep)
