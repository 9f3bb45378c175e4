"""Scrape log, proxy and dashboard endpoints.

- GET    /api/v1/logs — current session entries
- GET    /api/v1/logs/report — session report
- GET    /api/v1/logs/export — full export, also written to the export directory
- DELETE /api/v1/logs — clear the log
- GET    /api/v1/proxies — proxy chain with scores and health verdicts
- POST   /api/v1/proxies/health-check — probe every proxy now
- DELETE /api/v1/proxies/scores — reset the reputation table
- GET    /api/v1/dashboard — latest per-category state
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter

from acquisition.models.responses import ApiResponse

if TYPE_CHECKING:
    from acquisition.bootstrap import Components

logger = logging.getLogger(__name__)


def create_diagnostics_router(*, components: Components | Any) -> APIRouter:
    """Factory that creates the diagnostics router with injected dependencies."""
    router = APIRouter(prefix="/api/v1", tags=["diagnostics"])
    event_log = components.event_log

    @router.get("/logs")
    async def recent_logs() -> dict:
        entries = [entry.to_dict() for entry in event_log.get_recent_logs()]
        return ApiResponse(success=True, data=entries, meta={"total": len(entries)}).model_dump()

    @router.get("/logs/report")
    async def report() -> dict:
        return ApiResponse(success=True, data=event_log.get_report()).model_dump()

    @router.get("/logs/export")
    async def export() -> dict:
        path = event_log.download_logs(components.settings.log_export_dir)
        logger.info("Exported scrape log to %s", path)
        return ApiResponse(
            success=True,
            data=json.loads(event_log.export_logs()),
            meta={"path": str(path)},
        ).model_dump()

    @router.delete("/logs")
    async def clear_logs() -> dict:
        event_log.clear()
        return ApiResponse(success=True, data={"cleared": True}).model_dump()

    @router.get("/proxies")
    async def proxies() -> dict:
        records = components.health_checker.get_records()
        stats = components.scorer.get_stats(components.proxies)
        for row in stats:
            record = records.get(row["index"])
            row["healthy"] = record.healthy if record else None
            row["health_latency_ms"] = round(record.latency_ms, 1) if record else None
        ranked = components.scorer.get_sorted_proxies(components.proxies)
        return ApiResponse(
            success=True,
            data=stats,
            meta={
                "order": [r.index for r in ranked],
                "preferred_proxy": components.app_settings.preferred_proxy,
            },
        ).model_dump()

    @router.post("/proxies/health-check")
    async def health_check() -> dict:
        components.health_checker.clear_cache()
        healthy, total = await components.health_checker.run_health_checks(
            components.proxies, components.observer
        )
        return ApiResponse(success=True, data={"healthy": healthy, "total": total}).model_dump()

    @router.delete("/proxies/scores")
    async def reset_scores() -> dict:
        components.scorer.reset()
        return ApiResponse(success=True, data={"reset": True}).model_dump()

    @router.get("/dashboard")
    async def dashboard() -> dict:
        return ApiResponse(success=True, data=components.dashboard.snapshot()).model_dump()

    return router
