"""Ambiente do Alembic para o banco de rastreios."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from rastreios import models  # noqa: F401  (registra as tabelas no metadata)
from rastreios.config import settings
from rastreios.database import Base

config = context.config

DATABASE_URL = settings.database_url
IS_SQLITE = DATABASE_URL.startswith("sqlite")

# O ConfigParser do Alembic interpola "%", então senhas URL-encoded precisam de escape
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite não tem ALTER TABLE completo; alterações viram cópia de tabela
        render_as_batch=IS_SQLITE,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Gera o SQL das migrações sem conectar no banco (`alembic upgrade --sql`)."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Aplica as migrações em uma conexão própria, fora do pool da aplicação."""
    connectable = create_engine(
        DATABASE_URL,
        poolclass=pool.NullPool,
        connect_args={} if IS_SQLITE else {"client_encoding": "utf8"},
    )

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
