from ebgs.db.connection import get_url, json_serializer
import ebgs.db.schema as sch

from alembic import context
from logging.config import fileConfig
import sqlalchemy as sa

config = context.config
if config.config_file_name is not None and config.attributes.get(
        'configure_logger', True):
    fileConfig(config.config_file_name)

target_metadata = sch.Base.metadata


def _url():
    return config.get_main_option('sqlalchemy.url') or get_url()


def run_migrations_offline():
    context.configure(url=_url(), target_metadata=target_metadata,
            literal_binds=True, dialect_opts={'paramstyle': 'named'})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = sa.create_engine(_url(), poolclass=sa.pool.NullPool,
            json_serializer=json_serializer)
    with engine.connect() as connection:
        context.configure(connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == 'sqlite')
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
