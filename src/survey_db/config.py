"""Database connection settings for survey response storage.

``DATABASE_URL`` wins when set.  Otherwise the URL is assembled from
``PG_HOST``, ``PG_PORT``, ``PG_USER``, ``PG_PASSWORD`` and ``PG_DATABASE``.

Alembic needs a plain (libpq) URL because it migrates synchronously; the
runtime engine needs the ``postgresql+asyncpg`` dialect.
"""

import os

_ASYNC_PREFIX = "postgresql+asyncpg://"
_SYNC_PREFIX = "postgresql://"


def _url_from_env_parts() -> str:
    """Assemble a PostgreSQL URL from the individual ``PG_*`` variables."""
    return "{prefix}{user}:{password}@{host}:{port}/{database}".format(
        prefix=_SYNC_PREFIX,
        user=os.getenv("PG_USER", "survey"),
        password=os.getenv("PG_PASSWORD", "survey"),
        host=os.getenv("PG_HOST", "localhost"),
        port=os.getenv("PG_PORT", "5432"),
        database=os.getenv("PG_DATABASE", "survey"),
    )


def get_sync_url() -> str:
    """URL for synchronous drivers; used by the Alembic migration runner."""
    url = os.getenv("DATABASE_URL") or _url_from_env_parts()
    return url.replace(_ASYNC_PREFIX, _SYNC_PREFIX, 1)


def get_async_url() -> str:
    """URL for the asyncpg-backed SQLAlchemy engine."""
    url = os.getenv("DATABASE_URL") or _url_from_env_parts()
    if url.startswith(_SYNC_PREFIX):
        return _ASYNC_PREFIX + url[len(_SYNC_PREFIX):]
    return url
