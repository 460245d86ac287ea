from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from app.core.config import settings


class Base(DeclarativeBase):
	pass


def create_engine(database_url: str | None = None) -> AsyncEngine:
	url = make_url(database_url or settings.database_url)
	connect_args = {}
	if url.get_backend_name() == "sqlite":
		# seconds the driver waits on a locked database
		connect_args["timeout"] = settings.order_placement_timeout
	return create_async_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
	return async_sessionmaker(bind=bind, expire_on_commit=False)


engine: AsyncEngine = create_engine()
SessionLocal: async_sessionmaker[AsyncSession] = create_session_factory(engine)
