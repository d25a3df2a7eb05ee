# backend/alembic/env.py
"""
Alembic environment for careslot.

The target URL comes from Settings unless overridden on the command line:

    alembic -x url=sqlite:///./other.db upgrade head

Online runs connect through careslot.database.make_engine so migrations see
the same SQLite busy timeout and foreign-key enforcement as the service.
"""

from logging.config import fileConfig

from alembic import context

from careslot.config import settings
from careslot.database import make_engine
from careslot.models import metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get(
        "url", settings.resolved_database_url
    )


def _configure(**kwargs) -> None:
    url = _database_url()
    context.configure(
        target_metadata=metadata,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=url.startswith("sqlite"),
        compare_type=True,
        **kwargs,
    )


def run_offline() -> None:
    _configure(url=_database_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = make_engine(_database_url())
    try:
        with engine.connect() as connection:
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
