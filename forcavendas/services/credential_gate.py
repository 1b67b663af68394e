"""Autenticação dos dispositivos de vendedores."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional, Union

import bcrypt
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import SalesRepNotFoundError, UnauthorizedError
from ..models import SalesRep, SyncGrant

module_logger = logging.getLogger(__name__)

Credential = Union[str, int]


# =============================================================================
# FUNÇÕES DE HASH
# =============================================================================

def hash_password(password: str) -> str:
    """Gera hash bcrypt da senha."""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica se a senha corresponde ao hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Hash em formato inválido no cadastro
        return False


def hash_token(token: str) -> str:
    """Gera hash SHA-256 de um token."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_token() -> str:
    """Gera um token aleatório seguro."""
    return secrets.token_urlsafe(32)


def _as_utc(value: datetime) -> datetime:
    # SQLite devolve datetimes sem fuso
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# =============================================================================
# CREDENTIAL GATE
# =============================================================================

@dataclass(frozen=True)
class SalesRepIdentity:
    """Vendedor resolvido a partir da credencial."""

    id: str
    name: str
    code: int

    @classmethod
    def from_model(cls, rep: SalesRep) -> "SalesRepIdentity":
        return cls(id=rep.id, name=rep.name, code=rep.code)


class CredentialGate:
    """Resolve tokens Bearer (ou o código numérico legado) para um vendedor."""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or module_logger

    def authenticate(self, credential: Optional[Credential], now: Optional[datetime] = None) -> SalesRepIdentity:
        """Autentica um token (str) ou código de vendedor (int)."""
        if isinstance(credential, bool):
            raise UnauthorizedError("Credencial inválida")
        if isinstance(credential, int):
            return self.authenticate_code(credential)
        return self.authenticate_token(credential, now=now)

    def authenticate_token(self, token: Optional[str], now: Optional[datetime] = None) -> SalesRepIdentity:
        """Valida o token contra uma autorização ativa e não expirada."""
        if not token:
            raise UnauthorizedError("Token de autorização obrigatório")

        grant = self.db.query(SyncGrant).filter(SyncGrant.token_hash == hash_token(token)).first()
        if not grant:
            self.logger.warning("Token de sincronização desconhecido")
            raise UnauthorizedError()

        if not grant.active:
            self.logger.warning("Token de sincronização %s inativo (vendedor %s)", grant.id, grant.sales_rep_id)
            raise UnauthorizedError()

        now = now or datetime.now(UTC)
        if _as_utc(grant.expires_at) <= now:
            self.logger.warning("Token de sincronização %s expirado (vendedor %s)", grant.id, grant.sales_rep_id)
            raise UnauthorizedError()

        rep = self.db.get(SalesRep, grant.sales_rep_id)
        if not rep or not rep.active:
            self.logger.warning("Token %s pertence a vendedor inexistente ou inativo", grant.id)
            raise UnauthorizedError()

        return SalesRepIdentity.from_model(rep)

    def authenticate_code(self, code: int) -> SalesRepIdentity:
        """Resolve um vendedor ativo pelo código numérico."""
        rep = self.find_active_by_code(code)
        if not rep:
            self.logger.info("Vendedor %s não encontrado ou inativo", code)
            raise SalesRepNotFoundError()
        return SalesRepIdentity.from_model(rep)

    def find_active_by_code(self, code: int) -> Optional[SalesRep]:
        return self.db.query(SalesRep).filter(
            SalesRep.code == code,
            SalesRep.active == True,
        ).first()

    # -------------------------------------------------------------------------
    # Emissão de autorizações
    # -------------------------------------------------------------------------

    def login(
        self,
        code: int,
        password: str,
        device_id: Optional[str] = None,
        device_ip: Optional[str] = None,
    ) -> tuple[str, SyncGrant, SalesRep]:
        """Autentica código + senha e emite uma nova autorização."""
        rep = self.find_active_by_code(code)
        if not rep:
            raise SalesRepNotFoundError()

        if not rep.password_hash:
            raise UnauthorizedError(
                "Senha não configurada para este vendedor. Entre em contato com o administrador."
            )

        if not verify_password(password, rep.password_hash):
            self.logger.info("Senha incorreta para vendedor %s", code)
            raise UnauthorizedError("Código ou senha incorretos")

        token, grant = self.issue_grant(rep, device_id=device_id, device_ip=device_ip)
        return token, grant, rep

    def issue_grant(
        self,
        rep: SalesRep,
        name: Optional[str] = None,
        device_id: Optional[str] = None,
        device_ip: Optional[str] = None,
        expires_minutes: Optional[int] = None,
    ) -> tuple[str, SyncGrant]:
        """
        Cria uma autorização de sincronização para o vendedor.

        Retorna: (token em claro, registro). Apenas o hash é persistido.
        """
        token = generate_token()
        now = datetime.now(UTC)
        minutes = expires_minutes if expires_minutes is not None else settings.sync_grant_expire_minutes
        grant = SyncGrant(
            token_hash=hash_token(token),
            sales_rep_id=rep.id,
            name=name or f"Mobile App - {now.strftime('%d/%m/%Y')}",
            device_id=device_id,
            device_ip=device_ip,
            active=True,
            expires_at=now + timedelta(minutes=minutes),
        )
        self.db.add(grant)
        self.db.commit()
        self.db.refresh(grant)

        self.logger.info("Autorização de sincronização %s emitida para vendedor %s", grant.id, rep.code)
        return token, grant

    def revoke_grants(self, sales_rep_id: str) -> int:
        """Desativa todas as autorizações ativas do vendedor."""
        count = (
            self.db.query(SyncGrant)
            .filter(SyncGrant.sales_rep_id == sales_rep_id, SyncGrant.active == True)
            .update({SyncGrant.active: False}, synchronize_session=False)
        )
        self.db.commit()
        return count
