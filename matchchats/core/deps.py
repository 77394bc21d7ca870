"""
Dependency Injection

FastAPI dependencies for routes.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis

from matchchats.infra.directory import DirectoryClient, HttpDirectoryClient
from matchchats.infra.redis import get_redis
from matchchats.infra.storage import RedisSessionStorage, SessionStorage
from matchchats.services.aggregation import ChatAggregator


async def get_directory() -> AsyncGenerator[DirectoryClient, None]:
    """Directory client scoped to one request"""
    async with HttpDirectoryClient() as client:
        yield client


def get_storage(redis: Annotated[Redis, Depends(get_redis)]) -> SessionStorage:
    return RedisSessionStorage(redis)


# Type aliases for common dependencies
RedisDep = Annotated[Redis, Depends(get_redis)]
DirectoryDep = Annotated[DirectoryClient, Depends(get_directory)]
StorageDep = Annotated[SessionStorage, Depends(get_storage)]


def get_aggregator(directory: DirectoryDep) -> ChatAggregator:
    return ChatAggregator(directory)


AggregatorDep = Annotated[ChatAggregator, Depends(get_aggregator)]
