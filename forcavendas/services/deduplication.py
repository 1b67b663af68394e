"""Detecção de pedidos já importados."""

from ..schemas import InboundOrder
from .order_store import OrderStore


class Deduplicator:
    """Verifica se um pedido já existe pelo código ou pelo id do dispositivo.

    As duas chaves são identidades alternativas do mesmo documento: basta uma
    coincidir. Sem nenhuma das duas o pedido é aceito como novo.
    """

    def __init__(self, store: OrderStore):
        self.store = store

    def is_duplicate(self, order: InboundOrder) -> bool:
        if order.code is not None and self.store.find_order_by_code(order.code):
            return True
        if order.mobile_order_id and self.store.find_order_by_mobile_id(order.mobile_order_id):
            return True
        return False
