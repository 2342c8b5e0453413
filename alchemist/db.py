from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from alchemist.load_secrets import db_backend

if db_backend == "postgres":
    from alchemist.create_postgres_engine import engine
else:
    from alchemist.create_sqlite_engine import engine

# Centralized session factory to avoid creating it in router modules.
# Rows are read after commit (server-side created_at), so keep them loaded.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)
