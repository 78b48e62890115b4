"""
Redis read-through cache for catalog lookups.

CACHING STRATEGY
================

What we cache:
  - Sales round windows:  "catalog:sales_round:{id}"
  - Ticket type entries:  "catalog:ticket_type:{id}"

Why:
  - Every submission and update resolves its sales round and each ticket type
  - Both are immutable from this service's point of view, so entries never go stale
    within their TTL and need no explicit invalidation
  - Traffic spikes right after a round opens; the catalog tables should not take it

What we never cache:
  - Purchase requests, queue numbers or allocation state. Those are read inside
    the locked transaction that depends on them.

Failure mode:
  Redis is advisory. Any Redis error is logged and treated as a miss, and the
  client backs off so the following lookups skip Redis instead of waiting on it.
  The database stays the source of truth.
"""

import json
from datetime import datetime
from typing import Optional

from redis.exceptions import RedisError

from ticket_queue.core.config import get_settings
from ticket_queue.core.logging import get_logger
from ticket_queue.core.metrics import record_cache_operation
from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow
from ticket_queue.infrastructure.redis_client import get_redis, mark_redis_unavailable

logger = get_logger(__name__)

SALES_ROUND = "sales_round"
TICKET_TYPE = "ticket_type"


def _make_key(kind: str, entity_id: int) -> str:
    return f"catalog:{kind}:{entity_id}"


async def _get(kind: str, entity_id: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_key(kind, entity_id)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        record_cache_operation(kind, "error")
        mark_redis_unavailable(e)
        return None

    if data is None:
        logger.debug("cache_miss", key=key)
        record_cache_operation(kind, "miss")
        return None

    try:
        payload = json.loads(data)
    except ValueError:
        logger.warning("cache_payload_corrupt", key=key)
        record_cache_operation(kind, "error")
        return None

    logger.debug("cache_hit", key=key)
    record_cache_operation(kind, "hit")
    return payload


async def _set(kind: str, entity_id: int, payload: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_key(kind, entity_id)
    ttl = get_settings().CATALOG_CACHE_TTL
    try:
        await client.setex(key, ttl, json.dumps(payload))
        logger.debug("cache_set", key=key, ttl=ttl)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))
        record_cache_operation(kind, "error")
        mark_redis_unavailable(e)


async def get_cached_sales_round(sales_round_id: int) -> Optional[SalesRoundWindow]:
    payload = await _get(SALES_ROUND, sales_round_id)
    if payload is None:
        return None
    return SalesRoundWindow(
        id=payload["id"],
        event_id=payload["event_id"],
        window_start=datetime.fromisoformat(payload["window_start"]),
        window_end=datetime.fromisoformat(payload["window_end"]),
    )


async def set_cached_sales_round(window: SalesRoundWindow) -> None:
    await _set(SALES_ROUND, window.id, {
        "id": window.id,
        "event_id": window.event_id,
        "window_start": window.window_start.isoformat(),
        "window_end": window.window_end.isoformat(),
    })


async def get_cached_ticket_type(ticket_type_id: int) -> Optional[CatalogEntry]:
    payload = await _get(TICKET_TYPE, ticket_type_id)
    if payload is None:
        return None
    return CatalogEntry(id=payload["id"], event_id=payload["event_id"], name=payload["name"])


async def set_cached_ticket_type(entry: CatalogEntry) -> None:
    await _set(TICKET_TYPE, entry.id, {
        "id": entry.id,
        "event_id": entry.event_id,
        "name": entry.name,
    })


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
