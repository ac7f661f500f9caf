from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from .config import Settings
from .models import Base

# Create the database engine (one connection pool per app instance)
def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.database_url, echo=settings.sql_echo)

# Factory for creating new database sessions
def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

# Create tables on startup (async engine + sync-bridge)
async def init_models(engine: AsyncEngine):
    async with engine.begin() as conn:
        # run_sync lets us call the synchronous create_all() using this async connection
        await conn.run_sync(Base.metadata.create_all)

# Provides a session for each request, taken from the pool the app was built with
async def get_db_async(request: Request):
    async with request.app.state.sessionmaker() as session:
        yield session

def get_settings(request: Request) -> Settings:
    return request.app.state.settings
