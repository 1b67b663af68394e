"""Testes para o histórico de sincronização."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from forcavendas.models import SyncLog
from forcavendas.schemas import SyncEventType, SyncLogOut, SyncStatus
from forcavendas.services.sync_log import SyncLogService


class TestAppend:
    """Testes para inclusão de eventos."""

    def test_append(self, db_session, sales_rep):
        entry = SyncLogService(db_session).append(
            SyncEventType.UPLOAD,
            "orders",
            SyncStatus.COMPLETED,
            records_count=3,
            sales_rep_id=sales_rep.id,
            metadata={"total_orders": 3},
            device_id="aparelho-1",
            device_ip="10.0.0.1",
        )

        assert entry.id is not None
        stored = db_session.query(SyncLog).one()
        assert stored.event_type == "upload"
        assert stored.status == "completed"
        assert stored.details == {"total_orders": 3}
        assert stored.device_ip == "10.0.0.1"

    def test_accepts_plain_strings(self, db_session):
        entry = SyncLogService(db_session).append("error", "orders", "failed", error_message="Token inválido")
        assert entry.event_type == "error"
        assert entry.sales_rep_id is None

    def test_long_error_message_is_truncated(self, db_session):
        entry = SyncLogService(db_session).append("error", "orders", "failed", error_message="x" * 5000)
        assert len(entry.error_message) == 1000

    def test_write_failure_is_swallowed(self, caplog):
        """Falha de gravação vai para o log operacional e não propaga."""
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT INTO sync_logs", {}, Exception("database is locked"))

        result = SyncLogService(db).append(SyncEventType.UPLOAD, "orders", SyncStatus.COMPLETED)

        assert result is None
        db.rollback.assert_called_once()
        assert "Falha ao registrar evento" in caplog.text


class TestListAndClear:
    """Testes para consulta e limpeza do histórico."""

    def _add(self, db_session, sales_rep_id, minutes_ago, data_type="orders"):
        db_session.add(SyncLog(
            sales_rep_id=sales_rep_id,
            event_type="upload",
            data_type=data_type,
            status="completed",
            created_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
        ))
        db_session.commit()

    def test_list_newest_first(self, db_session, sales_rep):
        self._add(db_session, sales_rep.id, 30, "antigo")
        self._add(db_session, sales_rep.id, 1, "recente")
        self._add(db_session, sales_rep.id, 10, "meio")

        entries = SyncLogService(db_session).list(sales_rep.id)
        assert [e.data_type for e in entries] == ["recente", "meio", "antigo"]

    def test_list_only_own_entries(self, db_session, sales_rep):
        self._add(db_session, sales_rep.id, 1)
        self._add(db_session, "outro-vendedor", 1)
        assert len(SyncLogService(db_session).list(sales_rep.id)) == 1

    def test_list_limit(self, db_session, sales_rep):
        for i in range(5):
            self._add(db_session, sales_rep.id, i)
        assert len(SyncLogService(db_session).list(sales_rep.id, limit=3)) == 3

    def test_clear(self, db_session, sales_rep):
        self._add(db_session, sales_rep.id, 1)
        self._add(db_session, sales_rep.id, 2)
        self._add(db_session, "outro-vendedor", 1)

        assert SyncLogService(db_session).clear(sales_rep.id) == 2
        assert db_session.query(SyncLog).count() == 1

    def test_output_schema_exposes_metadata(self, db_session, sales_rep):
        entry = SyncLogService(db_session).append(
            "download", "primeira_sincronizacao", "completed", sales_rep_id=sales_rep.id, metadata={"produtos_count": 2}
        )
        out = SyncLogOut.model_validate(entry)
        assert out.metadata == {"produtos_count": 2}
        assert out.model_dump()["metadata"] == {"produtos_count": 2}
