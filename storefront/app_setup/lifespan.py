"""
Lifespan de la boutique: rate limiting du checkout (fastapi-limiter sur Redis).

Choix du backend, publié dans app.state pour /health:
  1) DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1 -> aucun (rate_limit_enabled=False)
  2) USE_FAKE_REDIS_FOR_TESTS=1 -> fakeredis en mémoire ("fakeredis")
  3) sinon Redis réel sur config.RATE_LIMIT_REDIS_URL ("redis")
Si l'init échoue: fenêtre locale en mémoire (LOCAL_RATE_LIMIT_FALLBACK=1, "local")
ou limite désactivée. À l'arrêt, la connexion du limiter est fermée.
"""
import os
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional, Tuple

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from storefront import config

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None

logger = logging.getLogger("uvicorn.error")

def _flag(name: str) -> bool:
    return os.getenv(name) == "1"

def _open_redis() -> Tuple[Any, str]:
    if _flag("USE_FAKE_REDIS_FOR_TESTS"):
        if FakeRedis is None:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return FakeRedis(decode_responses=True), "fakeredis"
    return aioredis.from_url(config.RATE_LIMIT_REDIS_URL, encoding="utf-8", decode_responses=True), "redis"

async def start_rate_limiter(app: FastAPI) -> Optional[Any]:
    """Initialise FastAPILimiter; retourne le client Redis retenu ou None."""
    app.state.rate_limit_enabled = False
    app.state.rate_limit_backend = None
    if _flag("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"):
        logger.info("storefront rate limit disabled (DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS)")
        return None
    try:
        r, backend = _open_redis()
        await FastAPILimiter.init(r, prefix=config.RATE_LIMIT_PREFIX)
    except Exception as e:
        # init assigne FastAPILimiter.redis avant de charger le script Lua
        FastAPILimiter.redis = None
        if _flag("LOCAL_RATE_LIMIT_FALLBACK"):
            app.state.rate_limit_enabled = True
            app.state.rate_limit_backend = "local"
            logger.warning("storefront rate limit: local in-memory fallback (init error: %s)", e)
        else:
            logger.warning("storefront rate limit disabled (init error: %s)", e)
        return None
    app.state.rate_limit_enabled = True
    app.state.rate_limit_backend = backend
    logger.info("storefront rate limit enabled backend=%s", backend)
    return r

async def stop_rate_limiter(r: Optional[Any]) -> None:
    if r is None:
        return
    try:
        await FastAPILimiter.close()
    finally:
        FastAPILimiter.redis = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    r = await start_rate_limiter(app)
    logger.info(
        "storefront ready: checkout rate limit=%s product cache ttl=%ss",
        app.state.rate_limit_backend, config.PRODUCT_CACHE_TTL_SECONDS,
    )
    try:
        yield
    finally:
        await stop_rate_limiter(r)
