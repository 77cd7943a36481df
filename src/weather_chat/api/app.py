"""FastAPI surface over the conversation orchestrator."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError as FastAPIValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.orchestrator import ConversationOrchestrator
from ..errors import RequestValidationError, SessionNotFoundError
from .schemas import ChatRequest, CreateSessionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    return request.app.state.orchestrator


@router.post("/chat")
async def chat(
    body: ChatRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(default=None),
):
    """Run one message through the weather pipeline."""
    try:
        result = await orchestrator.handle_message(
            body.message, session_id=body.session_id, owner_id=x_user_id
        )
    except RequestValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Validation failed", "message": str(e)},
        )
    except Exception as e:
        logger.error(f"Chat endpoint error: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "message": str(e)},
        )

    return {"success": True, **result.to_dict()}


@router.get("/context/{session_id}")
async def get_context(
    session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)
):
    context = await orchestrator.get_context(session_id)
    return {"success": True, "context": context.to_dict()}


@router.delete("/context/{session_id}")
async def clear_context(
    session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)
):
    await orchestrator.clear_context(session_id)
    return {"success": True, "message": "Context cleared"}


@router.post("/sessions")
async def create_session(
    body: Optional[CreateSessionRequest] = None,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(default=None),
):
    owner_id = (body.owner_id if body else None) or x_user_id
    session = await orchestrator.create_session(owner_id)
    return {"success": True, "sessionId": session.session_id}


@router.get("/sessions")
async def list_sessions(
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
    x_user_id: Optional[str] = Header(default=None),
):
    owner = owner_id or x_user_id
    if not owner:
        raise HTTPException(status_code=401, detail="Unauthorized")
    sessions = await orchestrator.list_sessions(owner)
    return {"success": True, "sessions": [s.to_summary() for s in sessions]}


@router.get("/sessions/{session_id}/messages")
async def list_messages(
    session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)
):
    turns = await orchestrator.list_turns(session_id)
    return {"success": True, "messages": [t.to_dict() for t in turns]}


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)
):
    if not await orchestrator.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True, "message": "Session deleted successfully"}


@router.get("/health")
async def health(orchestrator: ConversationOrchestrator = Depends(get_orchestrator)):
    return {"status": "ok", "version": __version__, "stats": orchestrator.get_stats()}


def create_app(orchestrator: ConversationOrchestrator) -> FastAPI:
    """Build the application around a fully wired orchestrator."""
    app = FastAPI(title="Weather Chat", version=__version__)
    app.state.orchestrator = orchestrator
    app.include_router(router)

    @app.exception_handler(FastAPIValidationError)
    async def validation_exception_handler(request, exc):
        """Malformed request bodies are client errors."""
        first = exc.errors()[0] if exc.errors() else {}
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Validation failed",
                "message": first.get("msg", "Invalid request"),
            },
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(request, exc):
        return JSONResponse(status_code=404, content={"success": False, "error": str(exc)})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code, content={"success": False, "error": exc.detail}
        )

    return app
