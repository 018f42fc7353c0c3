"""
HTTP entry point: FastAPI app factory and the engine routes.

Exposes the tracking engine to its collaborators over HTTP: the
interception layer posts request/response events and receives
block/allow decisions, the page probe posts storage and fingerprint
notifications, and the dashboard reads session statistics.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi import responses
from fastapi.middleware import cors

from privacy_guard import config, engine as engine_mod
from privacy_guard.models import events, session as session_models
from privacy_guard.utils import errors, logger

dotenv.load_dotenv()

log = logger.create_logger("Server")


def get_engine(request: fastapi.Request) -> engine_mod.PrivacyEngine:
    return request.app.state.engine


EngineDep = fastapi.Depends(get_engine)


def create_app(
    engine: engine_mod.PrivacyEngine | None = None,
    load_catalog: bool = True,
) -> fastapi.FastAPI:
    """Build the application around *engine* (a default one if omitted)."""

    @contextlib.asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None]:
        settings = app.state.engine.settings
        if settings.write_to_file:
            logger.start_log_file("privacy-guard")
        log.section("Privacy Guard Server Started")
        log.info("Environment", {"env": settings.environment})
        if load_catalog:
            await app.state.engine.reload_catalog()
        yield
        logger.end_log_file()

    app = fastapi.FastAPI(title="Privacy Guard", lifespan=lifespan)
    app.state.engine = engine or engine_mod.PrivacyEngine()

    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(errors.InvalidDomainError)
    async def invalid_domain_handler(
        _request: fastapi.Request, exc: errors.InvalidDomainError
    ) -> responses.JSONResponse:
        log.warn("Rejected user list entries", {"entries": exc.entries})
        return responses.JSONResponse(
            status_code=422,
            content={"error": errors.get_error_message(exc), "invalidEntries": exc.entries},
        )

    app.include_router(router)
    return app


router = fastapi.APIRouter(prefix="/api")


def _stats_or_404(
    stats: session_models.SessionStats | session_models.SessionSummary | None, session_id: str
) -> dict:
    if stats is None:
        raise fastapi.HTTPException(status_code=404, detail=f"Unknown session {session_id!r}")
    return stats.model_dump(by_alias=True)


def _accepted(applied: bool) -> dict[str, bool]:
    return {"applied": applied}


# ============================================================================
# Network events
# ============================================================================


@router.post("/requests")
def before_request(event: events.RequestEvent, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    """Classify a request; the caller cancels it when ``action`` is ``block``."""
    return engine.on_before_request(event).model_dump(by_alias=True)


@router.post("/response-headers", status_code=202)
def headers_received(event: events.ResponseHeadersEvent, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return _accepted(engine.on_headers_received(event))


@router.post("/request-headers", status_code=202)
def before_send_headers(event: events.RequestHeadersEvent, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return _accepted(engine.on_before_send_headers(event))


# ============================================================================
# Sessions
# ============================================================================


@router.post("/sessions/{session_id}/navigate")
def navigate(session_id: str, event: events.NavigateEvent, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return engine.on_navigate(session_id, event.url).model_dump(by_alias=True)


@router.post("/sessions/{session_id}/cookies", status_code=202)
def cookie_snapshot(
    session_id: str, snapshot: events.CookieSnapshot, engine: engine_mod.PrivacyEngine = EngineDep
) -> dict:
    return _accepted(engine.on_cookie_snapshot(session_id, snapshot.cookies))


@router.post("/sessions/{session_id}/storage", status_code=202)
def storage_report(
    session_id: str, report: session_models.StorageReport, engine: engine_mod.PrivacyEngine = EngineDep
) -> dict:
    return _accepted(engine.on_storage_report(session_id, report))


@router.post("/sessions/{session_id}/fingerprint", status_code=202)
def canvas_fingerprint(session_id: str, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return _accepted(engine.on_canvas_fingerprint(session_id))


@router.get("/sessions/{session_id}/stats")
def session_stats(session_id: str, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return _stats_or_404(engine.get_stats(session_id), session_id)


@router.get("/sessions/{session_id}/summary")
def session_summary(session_id: str, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return _stats_or_404(engine.get_summary(session_id), session_id)


@router.delete("/sessions/{session_id}", status_code=204)
def close_session(session_id: str, engine: engine_mod.PrivacyEngine = EngineDep) -> None:
    engine.close_session(session_id)


# ============================================================================
# Administration
# ============================================================================


@router.put("/user-lists")
def apply_user_lists(lists: events.UserLists, engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    engine.apply_user_lists(lists.user_blocklist, lists.user_allowlist)
    snapshot = engine.catalog.snapshot
    return events.UserLists(
        user_blocklist=sorted(snapshot.user_blocklist),
        user_allowlist=sorted(snapshot.user_allowlist),
    ).model_dump(by_alias=True)


@router.post("/catalog/reload")
async def reload_catalog(engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return {"trackerDomains": await engine.reload_catalog()}


@router.get("/health")
def health(engine: engine_mod.PrivacyEngine = EngineDep) -> dict:
    return {
        "status": "ok",
        "sessions": len(engine.sessions),
        "trackerDomains": len(engine.catalog.snapshot.tracker_domains),
    }


app = create_app()


def main() -> None:
    """Entry point for running the server."""
    settings = config.get_settings()
    log.success(f"Server listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
