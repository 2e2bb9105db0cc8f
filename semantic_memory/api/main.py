"""
Local HTTP surface for the memory tools.
Serves the same tool catalogue and responses as the MCP server.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .tools import ToolDispatcher, list_tools
from ..core.config import VERSION, debug_enabled
from ..core.service import MemoryService


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    memory_count: int
    bio_present: bool


def create_app(service: Optional[MemoryService] = None, manage_lifecycle: bool = True) -> FastAPI:
    """Build the FastAPI app around a MemoryService.

    With `manage_lifecycle`, the service is started and closed by the app's
    lifespan; otherwise the caller owns it.
    """
    service = service or MemoryService.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if manage_lifecycle:
            service.start()
        try:
            yield
        finally:
            if manage_lifecycle:
                service.close()

    app = FastAPI(
        title="Semantic Memory API",
        version=VERSION,
        description="Local semantic memory and user biography store with SQLite backend",
        docs_url="/docs" if debug_enabled() else None,
        redoc_url="/redoc" if debug_enabled() else None,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.dispatcher = ToolDispatcher(service.memories, service.bio)

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint():
        """Check system health."""
        db_health = service.db.health_check()
        return HealthResponse(
            status="healthy" if db_health else "unhealthy",
            version=VERSION,
            db_health=db_health,
            memory_count=service.memories.count() if db_health else 0,
            bio_present=service.bio.get() is not None if db_health else False,
        )

    @app.get("/tools", response_model=List[Dict[str, Any]])
    def list_tools_endpoint():
        return list_tools()

    @app.post("/tools/{name}")
    async def call_tool_endpoint(name: str, request: Request, arguments: Optional[Dict[str, Any]] = Body(default=None)):
        dispatcher: ToolDispatcher = request.app.state.dispatcher
        if not dispatcher.has_tool(name):
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
        return await run_in_threadpool(dispatcher.dispatch, name, arguments or {})

    return app
