"""
Health check endpoint
"""

from fastapi import APIRouter

from matchchats.core.config import settings
from matchchats.core.deps import RedisDep
from matchchats.infra.redis import check_redis

router = APIRouter()


@router.get("/health")
async def health_check(redis: RedisDep):
    return {
        "api": "ok",
        "env": settings.env,
        "redis": await check_redis(redis),
    }
