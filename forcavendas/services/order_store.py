"""Acesso ao sistema central usado pela importação de pedidos e pela primeira sincronização."""

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models import Customer, Order, OrderCodeCounter, OrderItem, Product, SalesRep

ORDER_COUNTER = "orders"


class OrderStore:
    """Leituras de referência e primitivas de escrita de pedidos.

    As escritas confirmam a transação; quem chama é responsável pelo rollback
    quando uma delas falha.
    """

    def __init__(self, db: Session):
        self.db = db

    # === Leitura ===

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self.db.get(Customer, customer_id)

    def get_sales_rep(self, sales_rep_id: str) -> Optional[SalesRep]:
        return self.db.get(SalesRep, sales_rep_id)

    def list_active_products(self) -> list[Product]:
        """Catálogo ativo, ordenado por código, com as unidades carregadas."""
        return (
            self.db.query(Product)
            .options(joinedload(Product.main_unit), joinedload(Product.sub_unit))
            .filter(Product.active == True)
            .order_by(Product.code)
            .all()
        )

    def find_order_by_code(self, code: int) -> Optional[Order]:
        return self.db.query(Order).filter(Order.code == code).first()

    def find_order_by_mobile_id(self, mobile_order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.mobile_order_id == mobile_order_id).first()

    # === Escrita ===

    def next_order_code(self) -> int:
        """
        Reserva o próximo código de pedido.

        O incremento acontece na mesma transação da inclusão do pedido; no
        PostgreSQL a linha do contador fica bloqueada (FOR UPDATE) até o commit.
        """
        counter = (
            self.db.query(OrderCodeCounter)
            .filter(OrderCodeCounter.name == ORDER_COUNTER)
            .with_for_update()
            .first()
        )
        if counter is None:
            counter = OrderCodeCounter(name=ORDER_COUNTER, last_value=0)
            self.db.add(counter)

        # Nunca reutiliza um código já enviado por um dispositivo
        max_code = self.db.query(func.max(Order.code)).scalar() or 0
        counter.last_value = max(counter.last_value or 0, max_code) + 1
        self.db.flush()
        return counter.last_value

    def insert_order(self, values: dict[str, Any]) -> Order:
        """Inclui o cabeçalho do pedido e confirma."""
        order = Order(**values)
        self.db.add(order)
        self.db.flush()
        self.db.commit()
        return order

    def insert_items(self, order_id: str, items: list[dict[str, Any]]) -> list[OrderItem]:
        """Inclui todos os itens de um pedido como uma única unidade."""
        rows = [OrderItem(order_id=order_id, **item) for item in items]
        self.db.add_all(rows)
        self.db.flush()
        self.db.commit()
        return rows

    def delete_order(self, order_id: str) -> None:
        """Remove um cabeçalho de pedido (compensação de itens que falharam)."""
        self.db.query(OrderItem).filter(OrderItem.order_id == order_id).delete(synchronize_session=False)
        self.db.query(Order).filter(Order.id == order_id).delete(synchronize_session=False)
        self.db.commit()
