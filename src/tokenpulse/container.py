from dependency_injector import containers, providers
from redis.asyncio import Redis

from tokenpulse.config import Settings
from tokenpulse.db.session import build_engine, build_session_factory


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["tokenpulse.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    redis = providers.Singleton(
        Redis.from_url,
        settings.provided.redis_url,
        decode_responses=True,
    )
