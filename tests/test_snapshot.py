"""Testes para a primeira sincronização do app."""

import pytest

from forcavendas.errors import SalesRepNotFoundError
from forcavendas.models import SyncLog
from forcavendas.services.credential_gate import SalesRepIdentity
from forcavendas.services.snapshot import SnapshotBuilder


@pytest.fixture
def identity(sales_rep):
    return SalesRepIdentity.from_model(sales_rep)


class TestSnapshotBuilder:
    """Testes para montagem do snapshot."""

    def test_sales_rep_header(self, db_session, catalog, identity):
        snapshot = SnapshotBuilder(db_session).build(identity)
        assert snapshot.vendedor.codigo == 101
        assert snapshot.vendedor.nome == "Ana Souza"
        assert snapshot.versao == "1.0.0"
        assert snapshot.timestamp is not None

    def test_only_active_products_ordered_by_code(self, db_session, catalog, identity):
        snapshot = SnapshotBuilder(db_session).build(identity)
        assert [p.codigo for p in snapshot.produtos] == [10, 20]

    def test_product_units(self, db_session, catalog, identity):
        arroz = SnapshotBuilder(db_session).build(identity).produtos[0]
        assert arroz.unidade == "CX"
        assert arroz.sub_unidade == "UN"
        assert arroz.fator_sub_unidade == 12
        assert arroz.preco == 25.9

    def test_only_own_active_customers_ordered_by_name(self, db_session, catalog, identity):
        snapshot = SnapshotBuilder(db_session).build(identity)
        assert [c.codigo for c in snapshot.clientes] == [3, 1]
        assert snapshot.clientes[1].dias_visita == ["segunda", "quinta"]

    def test_routes_and_payment_tables(self, db_session, catalog, identity):
        snapshot = SnapshotBuilder(db_session).build(identity)
        assert [r.nome for r in snapshot.rotas] == ["Rota Centro"]
        assert [t.nome for t in snapshot.tabelas_preco] == ["30/60", "À vista"]
        assert snapshot.tabelas_preco[0].prazos == [30, 60]

    def test_empty_catalog(self, db_session, identity):
        snapshot = SnapshotBuilder(db_session).build(identity)
        assert snapshot.produtos == []
        assert snapshot.clientes == []

    def test_inactive_sales_rep(self, db_session, sales_rep, identity):
        sales_rep.active = False
        db_session.commit()
        with pytest.raises(SalesRepNotFoundError):
            SnapshotBuilder(db_session).build(identity)

        entry = db_session.query(SyncLog).one()
        assert entry.event_type == "error"
        assert entry.status == "failed"
        assert entry.data_type == "primeira_sincronizacao"
        assert entry.sales_rep_id == sales_rep.id

    def test_download_is_logged(self, db_session, catalog, identity, sales_rep):
        SnapshotBuilder(db_session).build(identity)

        entry = db_session.query(SyncLog).one()
        assert entry.event_type == "download"
        assert entry.data_type == "primeira_sincronizacao"
        assert entry.status == "completed"
        assert entry.sales_rep_id == sales_rep.id
        assert entry.records_count == 4
        assert entry.details["produtos_count"] == 2
        assert entry.details["clientes_count"] == 2
