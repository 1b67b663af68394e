"""Router de login do vendedor no app mobile."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..errors import SyncError
from ..schemas import MobileLoginRequest, MobileLoginResponse, SalesRepOut
from ..services.credential_gate import CredentialGate
from .mobile_sync import raise_http

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.post("/auth", response_model=MobileLoginResponse)
@limiter.limit("10/minute")
def login(request: Request, data: MobileLoginRequest, db: DbSession):
    """Autentica código + senha do vendedor e emite um token de sincronização."""
    gate = CredentialGate(db)
    device_ip = request.client.host if request.client else None
    try:
        token, grant, rep = gate.login(
            data.sales_rep_code,
            data.password,
            device_id=data.device_id,
            device_ip=device_ip,
        )
    except SyncError as exc:
        raise_http(exc)

    logger.info("Vendedor %s autenticado no app", rep.code)
    return MobileLoginResponse(
        token=token,
        expires_at=grant.expires_at,
        sales_rep=SalesRepOut.model_validate(rep),
        message=f"Bem-vindo, {rep.name}!",
    )


@router.get("/vendedores/{codigo}", response_model=SalesRepOut)
def get_sales_rep(codigo: int, db: DbSession):
    """Confere se o código informado no app pertence a um vendedor ativo."""
    rep = CredentialGate(db).find_active_by_code(codigo)
    if not rep:
        raise HTTPException(status_code=404, detail="Vendedor não encontrado")
    return rep
