"""Testes para o script de emissão de tokens."""

import pytest

import issue_sync_grant
from forcavendas.models import SyncGrant
from forcavendas.services.credential_gate import CredentialGate, hash_token, verify_password

from conftest import TestingSessionLocal


@pytest.fixture
def run_cli(monkeypatch, capsys):
    monkeypatch.setattr(issue_sync_grant, "SessionLocal", TestingSessionLocal)

    def _run(*args):
        monkeypatch.setattr("sys.argv", ["issue_sync_grant.py", *map(str, args)])
        issue_sync_grant.main()
        return capsys.readouterr().out.strip().splitlines()

    return _run


class TestIssueSyncGrant:
    """Testes para emissão via linha de comando."""

    def test_issues_token(self, run_cli, db_session, sales_rep):
        lines = run_cli(101, 60)

        token = lines[-1]
        assert lines[0].startswith("OK: token para Ana Souza")
        assert db_session.query(SyncGrant).filter(SyncGrant.token_hash == hash_token(token)).count() == 1
        assert CredentialGate(db_session).authenticate(token).code == 101

    def test_sets_password(self, run_cli, db_session, sales_rep):
        run_cli(101, "--senha", "nova-senha")
        db_session.expire_all()
        assert verify_password("nova-senha", sales_rep.password_hash)

    def test_unknown_sales_rep(self, run_cli, db_session, sales_rep):
        with pytest.raises(SystemExit, match="não encontrado"):
            run_cli(999)
        assert db_session.query(SyncGrant).count() == 0
