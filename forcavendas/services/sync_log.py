"""Histórico de sincronização (append-only)."""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import SyncLog
from ..schemas import SyncEventType, SyncStatus

module_logger = logging.getLogger(__name__)


class SyncLogService:
    """Registra e consulta eventos de sincronização.

    A gravação é best-effort: uma falha ao registrar nunca derruba a
    sincronização que está sendo registrada, apenas vai para o log operacional.
    """

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or module_logger

    def append(
        self,
        event_type: SyncEventType,
        data_type: str,
        status: SyncStatus,
        records_count: int = 0,
        sales_rep_id: Optional[str] = None,
        error_message: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        device_id: Optional[str] = None,
        device_ip: Optional[str] = None,
    ) -> Optional[SyncLog]:
        """Inclui uma entrada no histórico. Retorna None se a gravação falhar."""
        entry = SyncLog(
            sales_rep_id=sales_rep_id,
            event_type=SyncEventType(event_type).value,
            data_type=data_type,
            records_count=records_count,
            status=SyncStatus(status).value,
            error_message=error_message[:1000] if error_message else None,
            details=metadata,
            device_id=device_id,
            device_ip=device_ip,
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.logger.exception(
                "Falha ao registrar evento de sincronização (%s/%s, vendedor %s)",
                event_type, data_type, sales_rep_id,
            )
            return None
        return entry

    def list(self, sales_rep_id: str, limit: Optional[int] = None) -> list[SyncLog]:
        """Eventos de um vendedor, do mais recente para o mais antigo."""
        limit = limit or settings.sync_log_list_limit
        return (
            self.db.query(SyncLog)
            .filter(SyncLog.sales_rep_id == sales_rep_id)
            .order_by(SyncLog.created_at.desc(), SyncLog.id.desc())
            .limit(limit)
            .all()
        )

    def clear(self, sales_rep_id: str) -> int:
        """Remove todo o histórico de um vendedor (ação administrativa)."""
        deleted = (
            self.db.query(SyncLog)
            .filter(SyncLog.sales_rep_id == sales_rep_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        self.logger.info("Histórico de sincronização do vendedor %s limpo (%s eventos)", sales_rep_id, deleted)
        return deleted
