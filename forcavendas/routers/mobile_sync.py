"""
Router da sincronização com o app do vendedor.
Recebe lotes de pedidos capturados offline e entrega a primeira sincronização.
"""

import logging
from typing import Any, List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..errors import SyncError, UnauthorizedError
from ..schemas import DeviceSnapshot, ImportResponse, SyncLogOut
from ..services.credential_gate import Credential, CredentialGate
from ..services.order_import import BatchImporter
from ..services.snapshot import SnapshotBuilder
from ..services.sync_log import SyncLogService

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
security = HTTPBearer(auto_error=False)


# =============================================================================
# HELPERS
# =============================================================================

def raise_http(exc: SyncError) -> NoReturn:
    """Converte um erro de lote no HTTPException correspondente."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    raise HTTPException(status_code=exc.http_status, detail=exc.message, headers=headers) from exc


def _extract_orders(payload: Any, *keys: str) -> Any:
    if not isinstance(payload, dict):
        return None
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _run_import(
    request: Request,
    db: DbSession,
    credential: Optional[Credential],
    orders: Any,
    device_id: Optional[str],
) -> ImportResponse:
    importer = BatchImporter(db)
    device_ip = request.client.host if request.client else None
    try:
        batch = importer.import_batch(credential, orders, device_id=device_id, device_ip=device_ip)
    except SyncError as exc:
        raise_http(exc)
    return batch.to_response()


# =============================================================================
# ENDPOINTS - PEDIDOS
# =============================================================================

@router.post("/orders/import", response_model=ImportResponse)
@limiter.limit("30/minute")
def import_orders(
    request: Request,
    db: DbSession,
    payload: Any = Body(default=None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_device_id: Optional[str] = Header(default=None),
):
    """
    Importa um lote de pedidos do app.

    - **Authorization**: `Bearer <token>` de sincronização
    - **orders**: lista de pedidos

    Falhas de pedidos individuais não são erro de protocolo: voltam em
    `results.errors` com `success: true`.
    """
    token = credentials.credentials if credentials else None
    return _run_import(request, db, token, _extract_orders(payload, "orders"), x_device_id)


@router.post("/vendedor/{codigo}/pedidos", response_model=ImportResponse)
@limiter.limit("30/minute")
def import_orders_by_code(
    request: Request,
    codigo: int,
    db: DbSession,
    payload: Any = Body(default=None),
    x_device_id: Optional[str] = Header(default=None),
):
    """Importação pelo código do vendedor (versões antigas do app)."""
    return _run_import(request, db, codigo, _extract_orders(payload, "orders", "pedidos"), x_device_id)


# =============================================================================
# ENDPOINTS - PRIMEIRA SINCRONIZAÇÃO
# =============================================================================

@router.get("/primeira-atualizacao/{codigo}", response_model=DeviceSnapshot)
def first_sync(codigo: int, db: DbSession):
    """Dados para o app operar offline: vendedor, produtos, clientes, rotas e tabelas."""
    gate = CredentialGate(db)
    try:
        identity = gate.authenticate_code(codigo)
        return SnapshotBuilder(db).build(identity)
    except SyncError as exc:
        raise_http(exc)


# =============================================================================
# ENDPOINTS - HISTÓRICO
# =============================================================================

@router.get("/sync-logs", response_model=List[SyncLogOut])
def my_sync_logs(
    db: DbSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Últimos eventos de sincronização do vendedor autenticado ("meu lote chegou?")."""
    try:
        identity = CredentialGate(db).authenticate_token(credentials.credentials if credentials else None)
    except SyncError as exc:
        raise_http(exc)
    return SyncLogService(db).list(identity.id)
