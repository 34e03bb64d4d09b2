"""FastAPI web application for cubik."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cubik import __version__
from cubik.core.discovery import discover_devices
from cubik.core.scheduler import AnimationScheduler
from cubik.exceptions import (
    AnimationNotFoundError,
    DeviceProtocolError,
    TransportError,
    ValidationError,
)
from cubik.models.animation import AnimationFrame, SavedAnimation, frames_to_colors
from cubik.models.config import Settings
from cubik.storage import AnimationStore

logger = logging.getLogger(__name__)


# --- Request Models ---

class StartAnimationRequest(BaseModel):
    """Start looping frames on a device."""
    device_location: str
    frames: list[AnimationFrame]


class StopAnimationRequest(BaseModel):
    """Stop a device's animation."""
    device_location: str


class SaveAnimationRequest(BaseModel):
    """Store a named animation."""
    device_id: str
    name: str
    frames: list[AnimationFrame]


class UpdateAnimationRequest(BaseModel):
    """Replace a stored animation's name and frames."""
    name: str
    frames: list[AnimationFrame]


class PlayAnimationRequest(BaseModel):
    """Play a stored animation on a device."""
    device_location: str


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def create_app(
    scheduler: AnimationScheduler,
    store: AnimationStore,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        scheduler: AnimationScheduler owning device playback
        store: Store for saved animations
        settings: Application settings (defaults from environment)

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Stopping all animations...")
        await scheduler.stop_all()

    app = FastAPI(
        title="Cubik",
        description="Discovery and animation playback for CubeLite LED matrices",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.state.scheduler = scheduler
    app.state.store = store

    # --- Error mapping ---

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, exc)

    @app.exception_handler(AnimationNotFoundError)
    async def handle_not_found(request: Request, exc: AnimationNotFoundError) -> JSONResponse:
        return _error(404, exc)

    @app.exception_handler(TransportError)
    async def handle_transport_error(request: Request, exc: TransportError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return _error(502, exc)

    @app.exception_handler(DeviceProtocolError)
    async def handle_device_error(request: Request, exc: DeviceProtocolError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return _error(502, exc)

    # --- Device APIs ---

    @app.get("/api/devices")
    async def get_devices() -> dict[str, Any]:
        """Discover devices on the local network."""
        devices = await asyncio.to_thread(
            discover_devices,
            settings.discovery_timeout,
            settings.target_model,
        )
        return {
            "devices": [
                {
                    "id": device.id,
                    "name": device.name,
                    "location": device.location,
                    "model": device.model,
                }
                for device in devices
            ]
        }

    # --- Playback APIs ---

    @app.post("/api/animations/start")
    async def start_animation(request: StartAnimationRequest) -> dict[str, Any]:
        """Start an animation on a device, replacing any running one."""
        await scheduler.start(request.device_location, frames_to_colors(request.frames))
        return {
            "message": "Animation started successfully",
            "frame_count": len(request.frames),
        }

    @app.post("/api/animations/stop")
    async def stop_animation(request: StopAnimationRequest) -> dict[str, Any]:
        """Stop a device's animation."""
        await scheduler.stop(request.device_location)
        return {"message": "Animation stopped successfully"}

    @app.get("/api/animations/active")
    async def active_animations() -> dict[str, Any]:
        """List devices that are currently playing an animation."""
        sessions = [scheduler.get_session(loc) for loc in scheduler.active_devices()]
        return {"sessions": [s.to_dict() for s in sessions if s is not None]}

    # --- Saved animation APIs ---

    @app.post("/api/animations")
    async def save_animation(request: SaveAnimationRequest) -> dict[str, Any]:
        """Store a new animation."""
        animation = store.save(request.device_id, request.name, request.frames)
        return {
            "id": animation.id,
            "message": "Animation saved successfully",
            "animation": animation.model_dump(mode="json"),
        }

    @app.get("/api/animations")
    async def list_animations(device_id: str) -> dict[str, Any]:
        """List stored animations for a device."""
        animations = store.list_by_device(device_id)
        return {"animations": [a.model_dump(mode="json") for a in animations]}

    @app.get("/api/animations/{animation_id}")
    async def get_animation(animation_id: str) -> SavedAnimation:
        """Get a stored animation."""
        return store.get(animation_id)

    @app.put("/api/animations/{animation_id}")
    async def update_animation(animation_id: str, request: UpdateAnimationRequest) -> dict[str, Any]:
        """Update a stored animation."""
        animation = store.update(animation_id, request.name, request.frames)
        return {
            "message": "Animation updated successfully",
            "animation": animation.model_dump(mode="json"),
        }

    @app.delete("/api/animations/{animation_id}")
    async def delete_animation(animation_id: str) -> dict[str, Any]:
        """Delete a stored animation."""
        store.delete(animation_id)
        return {"message": "Animation deleted successfully"}

    @app.post("/api/animations/{animation_id}/play")
    async def play_animation(animation_id: str, request: PlayAnimationRequest) -> dict[str, Any]:
        """Play a stored animation on a device."""
        animation = store.get(animation_id)
        await scheduler.start(request.device_location, animation.to_color_frames())
        return {
            "message": f"Playing '{animation.name}'",
            "frame_count": len(animation.frames),
        }

    return app
