"""Per-device animation playback."""

import asyncio
import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from cubik.core.codec import Color
from cubik.core.device import Device
from cubik.core.frame import MATRIX_HEIGHT, MATRIX_WIDTH, Framebuffer
from cubik.core.protocol import parse_location
from cubik.exceptions import ValidationError

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 1.0


class AnimationSession:
    """A device's currently looping animation."""

    def __init__(self, location: str, frames: tuple[tuple[Color, ...], ...]):
        self.location = location
        self.frames = frames
        self.stop_event = asyncio.Event()
        self.task: Optional[asyncio.Task] = None
        self.started_at = datetime.now(timezone.utc)
        self.ticks = 0
        self.frames_sent = 0
        self.send_failures = 0

    @property
    def is_alive(self) -> bool:
        return self.task is not None and not self.task.done()

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_location": self.location,
            "frame_count": len(self.frames),
            "started_at": self.started_at.isoformat(),
            "ticks": self.ticks,
            "frames_sent": self.frames_sent,
            "send_failures": self.send_failures,
        }


class AnimationScheduler:
    """Runs at most one looping animation per device.

    The registry of sessions is only touched under ``_lock``; playback itself
    and device I/O happen outside it, one asyncio task per device.
    """

    def __init__(
        self,
        width: int = MATRIX_WIDTH,
        height: int = MATRIX_HEIGHT,
        interval: float = FRAME_INTERVAL,
        device_factory: Callable[[str], Device] = Device,
    ):
        """Initialize the scheduler.

        Args:
            width: Matrix width every frame must match
            height: Matrix height every frame must match
            interval: Seconds between frames
            device_factory: Builds the device client for a location
        """
        self.width = width
        self.height = height
        self.interval = interval
        self._device_factory = device_factory
        self._sessions: dict[str, AnimationSession] = {}
        self._lock = asyncio.Lock()
        self._start_locks: dict[str, asyncio.Lock] = {}
        self._start_users: dict[str, int] = {}

    def _validate_frames(self, frames: Sequence[Sequence[Color]]) -> tuple[tuple[Color, ...], ...]:
        if not frames:
            raise ValidationError("Animation needs at least one frame")
        expected = self.width * self.height
        checked = []
        for i, frame in enumerate(frames):
            if len(frame) != expected:
                raise ValidationError(
                    f"Frame {i} has {len(frame)} pixels, expected {expected}"
                )
            checked.append(tuple(tuple(pixel) for pixel in frame))
        return tuple(checked)

    @asynccontextmanager
    async def _start_lock(self, location: str):
        """Serialize starts for one device. The lock is dropped once unused."""
        lock = self._start_locks.get(location)
        if lock is None:
            lock = self._start_locks[location] = asyncio.Lock()
        self._start_users[location] = self._start_users.get(location, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._start_users[location] -= 1
            if self._start_users[location] == 0:
                del self._start_users[location]
                del self._start_locks[location]

    async def start(self, location: str, frames: Sequence[Sequence[Color]]) -> AnimationSession:
        """Start looping ``frames`` on a device, replacing any running animation.

        Any existing session for the device has fully exited before the new
        one is registered. Direct mode is activated once before playback.

        Args:
            location: Device location
            frames: Frames of width*height RGB tuples

        Returns:
            The new session

        Raises:
            ValidationError: Malformed location or frames
            TransportError, DeviceProtocolError: If direct mode could not be
                activated; no session is registered in that case
        """
        parse_location(location)
        checked = self._validate_frames(frames)

        async with self._start_lock(location):
            await self.stop(location)

            device = self._device_factory(location)
            await asyncio.to_thread(device.activate_fx_mode)

            session = AnimationSession(location, checked)
            async with self._lock:
                session.task = asyncio.create_task(
                    self._play(session, device),
                    name=f"animation:{location}",
                )
                self._sessions[location] = session

        logger.info(f"Started {len(checked)}-frame animation on {location}")
        return session

    async def stop(self, location: str) -> None:
        """Stop a device's animation and wait for its loop to exit.

        Does nothing if no animation is running for the device. If the caller
        is cancelled while waiting, the loop still finishes its current tick
        and the session stays registered until a later stop joins it.
        """
        async with self._lock:
            session = self._sessions.get(location)
        if session is None:
            return

        session.stop_event.set()
        task = session.task
        try:
            # asyncio.wait does not forward our cancellation into the task
            await asyncio.wait([task])
        finally:
            if task.done():
                async with self._lock:
                    if self._sessions.get(location) is session:
                        del self._sessions[location]

        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Animation loop on {location} failed: {task.exception()}")

        logger.info(f"Stopped animation on {location}")

    async def stop_all(self) -> None:
        """Stop every running animation."""
        async with self._lock:
            locations = list(self._sessions)
        for location in locations:
            await self.stop(location)

    def get_session(self, location: str) -> Optional[AnimationSession]:
        return self._sessions.get(location)

    def is_running(self, location: str) -> bool:
        session = self._sessions.get(location)
        return session is not None and session.is_alive

    def active_devices(self) -> list[str]:
        """Locations with a registered animation."""
        return list(self._sessions)

    async def _wait_tick(self, session: AnimationSession) -> bool:
        """Sleep one interval. Returns False if the session was stopped meanwhile."""
        try:
            await asyncio.wait_for(session.stop_event.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return True
        return False

    async def _play(self, session: AnimationSession, device: Device) -> None:
        index = 0

        while await self._wait_tick(session):
            session.ticks += 1
            frame = session.frames[index]
            try:
                framebuffer = Framebuffer.from_pixels(self.width, self.height, frame)
                await asyncio.to_thread(device.update_leds, framebuffer.encode())
                session.frames_sent += 1
            except Exception as e:
                session.send_failures += 1
                logger.error(f"Error updating LEDs on {session.location}: {e}")

            index = (index + 1) % len(session.frames)
