"""JSON file store for saved animations."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from cubik.exceptions import AnimationNotFoundError, ValidationError
from cubik.models.animation import AnimationFrame, SavedAnimation

logger = logging.getLogger(__name__)


class AnimationStore:
    """Stores each animation as ``<data_dir>/animations/<id>.json``."""

    def __init__(self, data_dir: Path):
        """Initialize the store.

        Args:
            data_dir: Base data directory (created on first write)
        """
        self.data_dir = Path(data_dir)
        self.animations_dir = self.data_dir / "animations"

    def _path(self, animation_id: str) -> Path:
        try:
            uuid.UUID(animation_id)
        except (ValueError, AttributeError, TypeError):
            raise AnimationNotFoundError(animation_id) from None
        return self.animations_dir / f"{animation_id}.json"

    def _write(self, animation: SavedAnimation) -> None:
        self.animations_dir.mkdir(parents=True, exist_ok=True)
        path = self.animations_dir / f"{animation.id}.json"
        # Atomic write
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w") as f:
            f.write(animation.model_dump_json(indent=2))
        temp_path.replace(path)

    def _read(self, path: Path) -> SavedAnimation:
        with open(path) as f:
            return SavedAnimation.model_validate(json.load(f))

    def save(self, device_id: str, name: str, frames: list[AnimationFrame]) -> SavedAnimation:
        """Create a new animation.

        Returns:
            The stored animation with its generated id and timestamps
        """
        if not name:
            raise ValidationError("Animation name must not be empty")
        now = datetime.now(timezone.utc)
        animation = SavedAnimation(
            id=str(uuid.uuid4()),
            device_id=device_id,
            name=name,
            frames=frames,
            created_at=now,
            updated_at=now,
        )
        self._write(animation)
        logger.info(f"Saved animation '{name}' ({animation.id}) for device {device_id}")
        return animation

    def get(self, animation_id: str) -> SavedAnimation:
        """Load one animation.

        Raises:
            AnimationNotFoundError: If no animation has this id
        """
        path = self._path(animation_id)
        if not path.exists():
            raise AnimationNotFoundError(animation_id)
        return self._read(path)

    def list_by_device(self, device_id: str) -> list[SavedAnimation]:
        """List a device's animations, most recently updated first."""
        if not self.animations_dir.exists():
            return []

        animations = []
        for path in self.animations_dir.glob("*.json"):
            try:
                animation = self._read(path)
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable animation file {path}: {e}")
                continue
            if animation.device_id == device_id:
                animations.append(animation)

        animations.sort(key=lambda a: a.updated_at, reverse=True)
        return animations

    def update(self, animation_id: str, name: str, frames: list[AnimationFrame]) -> SavedAnimation:
        """Replace an animation's name and frames.

        Raises:
            AnimationNotFoundError: If no animation has this id
        """
        if not name:
            raise ValidationError("Animation name must not be empty")
        animation = self.get(animation_id)
        updated = animation.model_copy(
            update={
                "name": name,
                "frames": frames,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._write(updated)
        logger.info(f"Updated animation {animation_id}")
        return updated

    def delete(self, animation_id: str) -> None:
        """Delete an animation.

        Raises:
            AnimationNotFoundError: If no animation has this id
        """
        path = self._path(animation_id)
        if not path.exists():
            raise AnimationNotFoundError(animation_id)
        path.unlink()
        logger.info(f"Deleted animation {animation_id}")
