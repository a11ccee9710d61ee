from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

from nirapod_auth.db.base import Base
from nirapod_auth.db.models.user_model import User  # noqa: F401
from nirapod_auth.db.models.otp_model import OtpCode  # noqa: F401
from nirapod_auth.core.config import settings

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """`alembic -x db_url=...` wins over the DB_* settings.

    Migrations use a sync psycopg2 engine; only the app talks to asyncpg.
    """
    return context.get_x_argument(as_dictionary=True).get(
        "db_url", settings.database_url.replace("+asyncpg", "")
    )


def configure(**kwargs):
    # created_at relies on a server default, so compare those as well as types
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline():
    configure(url=get_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(get_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
