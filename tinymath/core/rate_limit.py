"""Shared rate limiter for the credential and code endpoints.

Counters live in Redis when it answers a ping, so limits hold across
workers; otherwise they are kept in process memory (development, tests).
Setting ``REDIS_URL`` to an empty string skips the Redis probe.
"""

import logging

import redis as sync_redis
from slowapi import Limiter
from slowapi.util import get_remote_address

from tinymath.config import settings

logger = logging.getLogger(__name__)

# Login, verification and reset attempts per client address
CREDENTIAL_LIMIT = "10/minute"
# Requests that trigger an outgoing code email
CODE_EMAIL_LIMIT = "5/minute"


def _redis_reachable(url: str) -> bool:
    try:
        client = sync_redis.from_url(url, socket_connect_timeout=1)
        try:
            client.ping()
        finally:
            client.close()
    except sync_redis.RedisError:
        return False
    return True


def _create_limiter() -> Limiter:
    if settings.REDIS_URL and _redis_reachable(settings.REDIS_URL):
        logger.info("Rate limiter: Redis storage (%s)", settings.REDIS_URL)
        return Limiter(key_func=get_remote_address, storage_uri=settings.REDIS_URL)

    logger.warning("Rate limiter: Redis unavailable, using in-memory storage")
    return Limiter(key_func=get_remote_address)


limiter = _create_limiter()
