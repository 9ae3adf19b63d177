from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def conflict_insert(session: AsyncSession, model):
    """
    INSERT construct that supports ON CONFLICT DO NOTHING on the bound dialect.
    Production runs on PostgreSQL, the test-suite on SQLite.
    """
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
