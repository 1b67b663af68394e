"""Emite um token de sincronização para um vendedor (uso administrativo).

Uso:
    python issue_sync_grant.py <codigo_vendedor> [validade_em_minutos] [--senha NOVA_SENHA]
"""

from __future__ import annotations

import argparse

from forcavendas.database import SessionLocal
from forcavendas.services.credential_gate import CredentialGate, hash_password


def main() -> None:
    parser = argparse.ArgumentParser(description="Emite token de sincronização para um vendedor")
    parser.add_argument("codigo", type=int, help="Código do vendedor")
    parser.add_argument("minutos", type=int, nargs="?", default=None, help="Validade do token em minutos")
    parser.add_argument("--senha", default=None, help="Define a senha de login do app antes de emitir")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        gate = CredentialGate(db)
        rep = gate.find_active_by_code(args.codigo)
        if not rep:
            raise SystemExit(f"ERRO: vendedor {args.codigo} não encontrado ou inativo")

        if args.senha:
            rep.password_hash = hash_password(args.senha)
            db.commit()

        token, grant = gate.issue_grant(rep, name="Emitido via CLI", expires_minutes=args.minutos)
        print(f"OK: token para {rep.name} (válido até {grant.expires_at.isoformat()})")
        print(token)
    finally:
        db.close()


if __name__ == "__main__":
    main()
