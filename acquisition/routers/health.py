"""Health, readiness, and metrics endpoints.

- GET /health — service status + proxy chain summary
- GET /readiness — 200 only when a proxy is configured and the last probe
  round found a healthy one
- GET /metrics — operational metrics
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Response

from acquisition.models.responses import ApiResponse

if TYPE_CHECKING:
    from acquisition.bootstrap import Components


def create_health_router(*, components: Components | Any = None) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    def _proxy_summary() -> dict:
        if components is None:
            return {"configured": 0, "healthy": 0, "last_probe_healthy": None}
        healthy, total = components.health_checker.get_health_summary(components.proxies)
        return {
            "configured": total,
            "healthy": healthy,
            "last_probe_healthy": components.health_checker.last_healthy_count,
        }

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check with proxy statistics."""
        return ApiResponse(
            success=True,
            data={"status": "healthy", "proxy_pool": _proxy_summary()},
        ).model_dump()

    @health_router.get("/readiness")
    async def readiness(response: Response) -> dict:
        """Readiness probe — 200 iff proxies configured AND last probes found a healthy one."""
        summary = _proxy_summary()
        last_healthy = summary["last_probe_healthy"] or 0
        is_ready = summary["configured"] > 0 and last_healthy > 0

        if not is_ready:
            response.status_code = 503

        return ApiResponse(
            success=is_ready,
            data={
                "ready": is_ready,
                "proxies_configured": summary["configured"],
                "proxy_healthy": last_healthy,
            },
            error=None if is_ready else "Service not ready",
        ).model_dump()

    @health_router.get("/metrics")
    async def metrics() -> dict:
        """Operational metrics endpoint."""
        if components is None:
            return ApiResponse(success=True, data={}).model_dump()

        cached = components.cache.get()
        return ApiResponse(
            success=True,
            data={
                "proxy_pool": _proxy_summary(),
                "proxy_scores": components.scorer.get_stats(components.proxies),
                "scrape_log": {
                    "entries": len(components.event_log),
                    "max_entries": components.event_log.max_logs,
                },
                "cache": {
                    "valid": components.cache.is_valid(),
                    "counts": cached.counts() if cached else {},
                },
                "seen_items": components.seen_items.get_stats(),
            },
        ).model_dump()

    return health_router
