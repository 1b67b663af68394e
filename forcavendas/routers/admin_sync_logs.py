"""Router administrativo do histórico de sincronização."""

import logging
import secrets
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from ..config import settings
from ..database import DbSession
from ..schemas import SyncLogClearResponse, SyncLogOut
from ..services.sync_log import SyncLogService

logger = logging.getLogger(__name__)


def require_admin_token(x_admin_token: Optional[str] = Header(default=None)) -> None:
    """Exige o token administrativo configurado em ADMIN_TOKEN."""
    if not settings.admin_token:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rotas administrativas desabilitadas",
        )
    if not x_admin_token or not secrets.compare_digest(x_admin_token, settings.admin_token):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")


router = APIRouter(dependencies=[Depends(require_admin_token)])


@router.get("/sync-logs/{sales_rep_id}", response_model=List[SyncLogOut])
def list_sync_logs(
    sales_rep_id: str,
    db: DbSession,
    limit: int = Query(default=20, ge=1, le=200),
):
    """Histórico de sincronização de um vendedor, do mais recente para o mais antigo."""
    return SyncLogService(db).list(sales_rep_id, limit=limit)


@router.delete("/sync-logs/{sales_rep_id}", response_model=SyncLogClearResponse)
def clear_sync_logs(sales_rep_id: str, db: DbSession):
    """Limpa o histórico de sincronização de um vendedor."""
    deleted = SyncLogService(db).clear(sales_rep_id)
    logger.info("Histórico do vendedor %s removido pelo administrador", sales_rep_id)
    return SyncLogClearResponse(deleted=deleted)
