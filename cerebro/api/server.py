# cerebro/api/server.py
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from config import settings
from cerebro.errors import CerebroError, PlayerNotFoundError
from cerebro.services import Services, build_services
from cerebro.tools.retriever.player_profiles import PlayerProfileRetriever

logger = logging.getLogger(__name__)


# ============================================================
# REQUEST BODIES
# ============================================================

class ChatRequest(BaseModel):
    message: Optional[str] = None
    sessionId: Optional[str] = None


class ReportRequest(BaseModel):
    message: Optional[str] = None
    playerId: Optional[str] = None
    player: Optional[Dict[str, Any]] = None
    sessionId: Optional[str] = None


class ScoutingRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    team: Optional[str] = None
    position: Optional[str] = None


# ============================================================
# APP
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    # built once before the first request is served
    if app.state.services is None:
        app.state.services = build_services(profiles=PlayerProfileRetriever())
        logger.info("services ready store=%s", app.state.services.store.source)
    yield


def get_services(request: Request) -> Services:
    return request.app.state.services


def _fail(status: int, message: str, exc: Optional[BaseException] = None) -> HTTPException:
    if exc is not None:
        logger.error("%s: %s", message, exc, exc_info=status >= 500)
    return HTTPException(status_code=status, detail=message)


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(
        title="CerebroChat API",
        description="Basketball scouting chat and report agents",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Accept", "Content-Type"],
    )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body."})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error."})

    # ---------- health ----------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ---------- agents ----------
    @app.post("/agent/chat")
    def agent_chat(body: ChatRequest, services: Services = Depends(get_services)):
        message = (body.message or "").strip()
        if not message:
            raise _fail(400, "Message is required.")
        try:
            out = services.chat_agent.invoke(message, session_id=body.sessionId)
        except PlayerNotFoundError as e:
            raise _fail(404, "Player not found.", e)
        except CerebroError as e:
            raise _fail(500, "Agent chat request failed.", e)
        return {"reply": out["reply"], "agent": "chat", "toolUsed": out["toolUsed"]}

    @app.post("/agent/report")
    def agent_report(body: ReportRequest, services: Services = Depends(get_services)):
        message = (body.message or "").strip()
        player_id = (body.playerId or "").strip()
        player = body.player or None
        if not message and not player_id and not player:
            raise _fail(400, "message, player, or playerId is required.")
        remembered = services.memory.get(body.sessionId) if body.sessionId else None
        try:
            out = services.report_agent.invoke(
                message=message, player=player, player_id=player_id, remembered=remembered
            )
        except PlayerNotFoundError as e:
            raise _fail(404, "Player not found.", e)
        except CerebroError as e:
            raise _fail(500, "Agent report request failed.", e)
        return {"report": out["report"], "agent": "report", "toolUsed": out["toolUsed"]}

    # ---------- players ----------
    @app.get("/players")
    def search_players(
        query: str = Query(default=""),
        team: str = Query(default=""),
        position: str = Query(default=""),
        limit: str = Query(default=str(settings.DEFAULT_SEARCH_LIMIT)),
        services: Services = Depends(get_services),
    ):
        if not query.strip():
            return {"results": []}
        try:
            results = services.store.search(query=query, team=team, position=position, limit=limit)
        except CerebroError as e:
            raise _fail(500, "Player search failed.", e)
        return {"results": results}

    @app.get("/players/{player_id}")
    def get_player(player_id: str, services: Services = Depends(get_services)):
        try:
            return services.store.get(player_id)
        except PlayerNotFoundError as e:
            raise _fail(404, "Player not found.", e)
        except CerebroError as e:
            raise _fail(500, "Player lookup failed.", e)

    # ---------- scouting ----------
    @app.post("/scouting/generate")
    def generate_scouting(body: ScoutingRequest, services: Services = Depends(get_services)):
        if not body.name or not body.team:
            raise _fail(400, "Player name and team are required")
        try:
            description = services.synthesis.scouting_report(body.model_dump())
        except CerebroError as e:
            raise _fail(500, "Failed to generate scouting report", e)
        if not description:
            raise _fail(500, "No description generated")
        return {"description": description}

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
