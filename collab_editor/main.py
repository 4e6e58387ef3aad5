from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import asyncio
import logging
import os
import uvicorn
from dotenv import load_dotenv

from collab_editor.code_editor.execution import ExecutionGateway
from collab_editor.code_editor.manager import ConnectionManager
from collab_editor.code_editor.relay import Relay
from collab_editor.rooms.registry import RoomRegistry

# Load environment variables
load_dotenv()

# --- Configuration ---
PORT = int(os.getenv("PORT", 10000))
FRONTEND_DIST = Path(__file__).resolve().parent / "frontend" / "dist"

logger = logging.getLogger(__name__)


# --- Lifespan ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let in-flight executions finish delivering before shutdown.
    pending = list(app.state.manager.tasks)
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


# --- Routers ---
from collab_editor.code_editor.router import router as editor_router
from collab_editor.code_editor.execution import router as execution_router
from collab_editor.code_editor.languages import router as languages_router


def create_app(
    registry: Optional[RoomRegistry] = None,
    gateway: Optional[ExecutionGateway] = None,
    frontend_dir: Path = FRONTEND_DIST,
) -> FastAPI:
    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One of each per process, shared by every connection.
    app.state.registry = registry if registry is not None else RoomRegistry()
    app.state.gateway = gateway if gateway is not None else ExecutionGateway()
    app.state.manager = ConnectionManager()
    app.state.relay = Relay(app.state.registry, app.state.gateway)

    app.include_router(editor_router)
    app.include_router(execution_router)
    app.include_router(languages_router, prefix="/api")

    # --- Basic Routes ---
    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz():
        return "OK"

    # Registered last so it never shadows the API.
    @app.get("/{full_path:path}", include_in_schema=False)
    def serve_frontend(full_path: str):
        root = frontend_dir.resolve()
        candidate = (root / full_path).resolve()
        if full_path and root in candidate.parents and candidate.is_file():
            return FileResponse(candidate)
        return FileResponse(root / "index.html")

    return app


app = create_app()


def run():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info(f"Server running on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
