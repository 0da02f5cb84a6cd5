"""Cached, rate-limited gateway in front of the spreadsheet origin.

Per request:
    admit -> (rejected: 429) | cache lookup -> (hit: return)
    | (miss: origin fetch -> sanitize -> sort -> cache write -> return)

The gateway is the only writer of cache entries. Each resource has a single
fixed cache key because result sets are small and always fetched whole.
Store failures degrade to "cache miss"; origin failures propagate.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.fixed_window import hash_client_identity
from app.adapters.sheets.base import AbstractSheetsClient
from app.adapters.store.base import AbstractKeyValueStore
from app.core.errors import RateLimitExceededAppError
from app.services.sanitizer import ColumnMap, sanitize_rows

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class CacheStatus(str, Enum):
    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True)
class ResourceConfig:
    """Origin location and table layout of one exposed resource."""

    name: str
    spreadsheet_id: str
    cell_range: str
    column_map: ColumnMap
    cache_key: str


@dataclass(frozen=True)
class CachePolicy:
    """TTLs for cached results.

    Empty results get the shorter TTL: an empty table is more likely a
    transient upstream state than real data.
    """

    ttl_seconds: int = 300
    empty_ttl_seconds: int = 60

    def ttl_for(self, records: Sequence[Record]) -> int:
        return self.ttl_seconds if records else self.empty_ttl_seconds


@dataclass
class GatewayResult:
    """Records plus the side-channel metadata the HTTP layer turns into headers."""

    records: list[Record]
    cache_status: CacheStatus
    rate_limit: RateLimitResult | None = None
    stored_at: float | None = field(default=None, repr=False)


def sort_by_date_desc(records: Sequence[Record]) -> list[Record]:
    """Sort records most recent first; records without a date go last.

    Dated records are ordered by their canonical ``YYYY-MM-DD`` string, which
    sorts chronologically. Ties and undated records keep source order.
    """
    dated = [record for record in records if record.get("date")]
    undated = [record for record in records if not record.get("date")]
    return sorted(dated, key=lambda record: record["date"], reverse=True) + undated


class CachedGateway:
    """Read-through cache with admission control for spreadsheet resources.

    Attributes:
        resources: Resource definitions by id.
    """

    def __init__(
        self,
        *,
        resources: Mapping[str, ResourceConfig],
        origin: AbstractSheetsClient,
        store: AbstractKeyValueStore | None,
        limiters: Mapping[str, AbstractRateLimiter] | None = None,
        cache_policy: CachePolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the gateway.

        Args:
            resources: Resource definitions by id.
            origin: Spreadsheet client used on cache misses.
            store: Cache store; None means every request fetches origin.
            limiters: Admission control by resource id; missing entries are unlimited.
            cache_policy: TTLs for cache writes.
            clock: Time source function returning UNIX time in seconds.
        """
        self.resources = dict(resources)
        self._origin = origin
        self._store = store
        self._limiters = dict(limiters or {})
        self._cache_policy = cache_policy or CachePolicy()
        self._clock = clock

    def _get_resource(self, resource_id: str) -> ResourceConfig:
        try:
            return self.resources[resource_id]
        except KeyError:
            raise KeyError(f"unknown resource: {resource_id}") from None

    async def _admit(self, resource_id: str, client_identity: str) -> RateLimitResult | None:
        limiter = self._limiters.get(resource_id)
        if limiter is None:
            return None

        result = await limiter.admit(client_identity)
        if not result.allowed:
            raise RateLimitExceededAppError(
                code="rate_limit_exceeded",
                message="Rate limit exceeded",
                details="Too many requests. Please try again later.",
                result=result,
            )
        return result

    async def _read_cache(self, resource: ResourceConfig) -> tuple[list[Record], float] | None:
        if self._store is None:
            return None

        try:
            raw = await self._store.get(resource.cache_key)
        except Exception as exc:
            logger.error(
                "cache.store_error",
                extra={
                    "operation": "get",
                    "cache_key": resource.cache_key,
                    "error_type": type(exc).__name__,
                },
            )
            return None

        if raw is None:
            logger.debug("cache.miss", extra={"cache_key": resource.cache_key, "reason": "not_found"})
            return None

        try:
            entry = json.loads(raw)
            records = entry["records"]
            stored_at = float(entry["stored_at"])
        except (ValueError, TypeError, KeyError):
            logger.warning("cache.miss", extra={"cache_key": resource.cache_key, "reason": "corrupt"})
            return None

        if not isinstance(records, list):
            logger.warning("cache.miss", extra={"cache_key": resource.cache_key, "reason": "corrupt"})
            return None

        logger.debug("cache.hit", extra={"cache_key": resource.cache_key, "records": len(records)})
        return records, stored_at

    async def _write_cache(self, resource: ResourceConfig, records: list[Record], stored_at: float) -> None:
        if self._store is None:
            return

        ttl_seconds = self._cache_policy.ttl_for(records)
        payload = json.dumps({"stored_at": stored_at, "records": records}, ensure_ascii=False)
        try:
            await self._store.put(resource.cache_key, payload, ttl_seconds)
        except Exception as exc:
            logger.error(
                "cache.store_error",
                extra={
                    "operation": "put",
                    "cache_key": resource.cache_key,
                    "error_type": type(exc).__name__,
                },
            )
            return

        logger.info(
            "cache.set",
            extra={"cache_key": resource.cache_key, "records": len(records), "ttl_s": ttl_seconds},
        )

    async def _load_from_origin(self, resource: ResourceConfig) -> list[Record]:
        rows = await self._origin.fetch_values(resource.spreadsheet_id, resource.cell_range)
        records = [record.model_dump() for record in sanitize_rows(rows, resource.column_map)]
        return sort_by_date_desc(records)

    async def fetch(self, resource_id: str, client_identity: str = "unknown") -> GatewayResult:
        """Return the ordered records of a resource.

        Args:
            resource_id: Resource to serve (e.g. "breaches").
            client_identity: Client key used for admission control.

        Returns:
            GatewayResult with records, cache status and rate limit metadata.

        Raises:
            KeyError: If the resource id is unknown.
            RateLimitExceededAppError: If the client is over its budget.
            ConfigurationAppError: If the origin credential is missing.
            UpstreamAppError: If the origin call fails.
        """
        resource = self._get_resource(resource_id)

        # Rejected requests must not touch cache or origin
        rate_limit = await self._admit(resource_id, client_identity)

        cached = await self._read_cache(resource)
        if cached is not None:
            records, stored_at = cached
            return GatewayResult(
                records=records,
                cache_status=CacheStatus.HIT,
                rate_limit=rate_limit,
                stored_at=stored_at,
            )

        records = await self._load_from_origin(resource)
        stored_at = self._clock()
        await self._write_cache(resource, records, stored_at)

        logger.info(
            "gateway.origin_fetched",
            extra={
                "resource": resource.name,
                "records": len(records),
                "client_hash": hash_client_identity(client_identity),
            },
        )
        return GatewayResult(
            records=records,
            cache_status=CacheStatus.MISS,
            rate_limit=rate_limit,
            stored_at=stored_at,
        )
