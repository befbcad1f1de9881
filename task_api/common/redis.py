from redis import Redis
from typing import TYPE_CHECKING

from task_api.config import Settings


RedisClient = Redis
if TYPE_CHECKING:
    RedisClient = Redis[str]  # type: ignore


def create_redis_client(settings: Settings) -> RedisClient:
    # Connections are opened lazily by the pool, so a bad URL fails here
    # but an unreachable server only fails on the first command.
    try:
        return Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=30,
        )
    except ValueError as e:
        raise RuntimeError(f"Invalid Redis URL: {settings.REDIS_URL}") from e
