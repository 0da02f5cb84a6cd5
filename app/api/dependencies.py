"""Wiring of gateway components from settings, exposed as FastAPI dependencies.

This is the only place that reads the global ``settings``; the limiter,
store, origin client and gateway all receive explicit configuration so tests
can build them with fakes or override ``get_gateway`` on the app.
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.rate_limit.base import RATE_LIMIT_POLICIES, AbstractRateLimiter
from app.adapters.rate_limit.fixed_window import FixedWindowRateLimiter
from app.adapters.sheets.google_sheets import GoogleSheetsClient
from app.adapters.store.base import AbstractKeyValueStore
from app.adapters.store.in_memory import InMemoryKeyValueStore
from app.core.config import CacheSettings, RateLimitSettings, Settings, SheetsSettings, settings
from app.core.rate_limit import parse_header_list, resolve_client_identity
from app.services.gateway import CachedGateway, CachePolicy, ResourceConfig
from app.services.sanitizer import BREACH_COLUMNS, CONFERENCE_COLUMNS

logger = logging.getLogger(__name__)

BREACHES = "breaches"
CONFERENCES = "conferences"

_gateway: CachedGateway | None = None


def build_store(cache_settings: CacheSettings) -> AbstractKeyValueStore | None:
    """Create the key-value store, or None when caching is disabled."""
    if cache_settings.backend == "none":
        logger.warning("store.disabled", extra={"effect": "cache_bypassed_and_rate_limit_open"})
        return None
    return InMemoryKeyValueStore(max_entries=cache_settings.max_entries)


def build_resources(sheets_settings: SheetsSettings) -> dict[str, ResourceConfig]:
    """Describe where each resource lives in the origin and how to read it."""
    return {
        BREACHES: ResourceConfig(
            name=BREACHES,
            spreadsheet_id=sheets_settings.breaches_spreadsheet_id,
            cell_range=sheets_settings.breaches_range,
            column_map=BREACH_COLUMNS,
            cache_key="breaches_data",
        ),
        CONFERENCES: ResourceConfig(
            name=CONFERENCES,
            spreadsheet_id=sheets_settings.conferences_spreadsheet_id,
            cell_range=sheets_settings.conferences_range,
            column_map=CONFERENCE_COLUMNS,
            cache_key="conferences_data",
        ),
    }


def build_limiters(
    rate_limit_settings: RateLimitSettings,
    store: AbstractKeyValueStore | None,
) -> dict[str, AbstractRateLimiter]:
    """Create one limiter per resource using its configured policy."""
    if not rate_limit_settings.enabled:
        return {}

    policy_names = {
        BREACHES: rate_limit_settings.breaches_policy,
        CONFERENCES: rate_limit_settings.conferences_policy,
    }
    return {
        resource_id: FixedWindowRateLimiter(
            policy=RATE_LIMIT_POLICIES[policy_name],
            store=store,
            namespace=policy_name,
        )
        for resource_id, policy_name in policy_names.items()
    }


def build_gateway(cfg: Settings) -> CachedGateway:
    """Assemble a gateway from a settings object."""
    store = build_store(cfg.cache)
    origin = GoogleSheetsClient(
        api_key=cfg.sheets.api_key,
        base_url=cfg.sheets.base_url,
        timeout_seconds=cfg.sheets.timeout_seconds,
    )
    return CachedGateway(
        resources=build_resources(cfg.sheets),
        origin=origin,
        store=store,
        limiters=build_limiters(cfg.rate_limit, store),
        cache_policy=CachePolicy(
            ttl_seconds=cfg.cache.ttl_seconds,
            empty_ttl_seconds=cfg.cache.empty_ttl_seconds,
        ),
    )


def get_gateway() -> CachedGateway:
    """Return the process-wide gateway (its store holds cache and counters)."""
    global _gateway

    if _gateway is None:
        _gateway = build_gateway(settings)
    return _gateway


def reset_gateway() -> None:
    """Drop the process-wide gateway so the next request rebuilds it."""
    global _gateway
    _gateway = None


def get_client_identity(request: Request) -> str:
    """FastAPI dependency resolving the rate limit key for the request."""
    return resolve_client_identity(request, parse_header_list(settings.rate_limit.client_ip_headers))
