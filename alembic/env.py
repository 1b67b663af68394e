"""Ambiente do Alembic para o schema do Força de Vendas.

A URL do banco vem sempre de DATABASE_URL (forcavendas.config), nunca do alembic.ini.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from forcavendas.database import Base
from forcavendas.config import settings
from forcavendas import models  # noqa: F401

config = context.config

DATABASE_URL = settings.database_url
# O alembic.ini passa por ConfigParser: "%" de senhas codificadas precisa virar "%%"
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Tabelas de vendedores, cadastros, pedidos e sincronização
target_metadata = Base.metadata

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def run_migrations_offline() -> None:
    """Gera o SQL das migrações sem conectar ao banco (alembic upgrade --sql)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Aplica as migrações direto no banco configurado."""
    # SQLite (testes locais) não aceita client_encoding
    connect_args = {} if DATABASE_URL.startswith("sqlite") else {"client_encoding": "utf8"}
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool, connect_args=connect_args)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, **COMPARE_OPTIONS)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
