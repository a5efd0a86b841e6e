import logging
import os
from pathlib import Path

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from .broadcast import Broadcaster
from .live_session import LiveSession
from .router import MessageRouter
from .socket_registry import SocketRegistry
from .ws_handler import websocket_relay

logger = logging.getLogger(__name__)

app = FastAPI()

# --- Configuration ---

GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY")

BASE_DIR = Path(__file__).resolve().parent.parent
FRONTEND_DIR = BASE_DIR / "frontend"


def _get_cors_origins() -> list[str]:
    """Get CORS origins from environment variable or allow all."""
    cors_origins_str = os.environ.get("RELAY_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
    return origins if origins else ["*"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Relay core ---

registry = SocketRegistry()
broadcaster = Broadcaster(registry)
live_session = LiveSession(
    api_key=GOOGLE_API_KEY,
    on_message=broadcaster.handle_upstream_message,
    on_lifecycle=broadcaster.handle_lifecycle,
)
router = MessageRouter(registry, live_session)


@app.on_event("startup")
async def startup_event():
    live_session.start()


@app.on_event("shutdown")
async def shutdown_event():
    await live_session.stop()


# --- Pages ---

app.mount("/static", StaticFiles(directory=str(FRONTEND_DIR)), name="static")


def _read_page(name: str) -> HTMLResponse:
    html_path = FRONTEND_DIR / name
    if not html_path.is_file():
        raise HTTPException(status_code=404, detail="Page not found")
    return HTMLResponse(html_path.read_text(encoding="utf-8"))


@app.get("/")
async def index():
    return _read_page("index.html")


@app.get("/coding")
async def coding():
    return _read_page("coding.html")


@app.get("/api/status")
async def api_status():
    return {"upstream_open": live_session.is_open, "clients": len(registry)}


# --- WebSocket ---

@app.websocket("/")
async def websocket_index(websocket: WebSocket):
    await websocket_relay(websocket, registry=registry, router=router)


@app.websocket("/coding")
async def websocket_coding(websocket: WebSocket):
    await websocket_relay(websocket, registry=registry, router=router)
