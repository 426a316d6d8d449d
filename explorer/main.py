"""Entry point for the FastAPI-powered Steam explorer."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import settings
from .database import Database
from .errors import StoreUnavailable
from .services.app_store import SqlAppStore
from .services.cache_gate import CacheGate, SqlScalarStore
from .services.explorer import ExplorerSession, HostPage
from .services.steam import SteamClient

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app: FastAPI


class ActivationRequest(BaseModel):
    """The host page an activation runs against."""

    url: str | None = None
    html: str | None = None


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    async with AsyncExitStack() as exit_stack:
        steam_http_client = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                timeout=httpx.Timeout(settings.request_timeout_seconds, connect=10.0),
                follow_redirects=True,
            )
        )
        database = Database(settings.database_url)
        exit_stack.push_async_callback(database.dispose)
        await database.create_all()
        logger.info("Database opened!")

        session = ExplorerSession(
            settings,
            SteamClient(settings, steam_http_client),
            SqlAppStore(database.session_factory),
            CacheGate(SqlScalarStore(database.session_factory)),
        )
        fastapi_app.state.explorer_session = session
        fastapi_app.state.database = database

        yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Surface Steam store apps you have not seen yet",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_explorer_session(fastapi_app: FastAPI) -> ExplorerSession:
    session = getattr(fastapi_app.state, "explorer_session", None)
    if not isinstance(session, ExplorerSession):
        raise RuntimeError("Explorer session not initialised")
    return session


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/activate")
    async def activate(request: ActivationRequest) -> dict[str, object]:
        session = get_explorer_session(fastapi_app)
        try:
            result = await session.start(HostPage(url=request.url, html=request.html))
        except StoreUnavailable as exc:
            logger.error("App store unavailable: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return result.to_payload()

    @fastapi_app.post("/invalidate")
    async def invalidate() -> dict[str, str]:
        session = get_explorer_session(fastapi_app)
        try:
            await session.invalidate()
        except StoreUnavailable as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return {"status": "invalidated"}


app = create_app()
