"""Temp artifact storage: staging uploads, allocating output paths, deleting both.

Every path handed out here carries a fresh uuid4, so concurrent requests never
collide and nothing is ever overwritten. Deletion is best effort: a failure is
logged and reported as ``CleanupOutcome.FAILED`` but never raised, so it cannot
replace the result of the conversion that owned the file.
"""
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from file_converter import config

logger = logging.getLogger("file_converter.storage")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class StorageContext:
    upload_dir: Path
    output_dir: Path
    retention_hours: float = 24.0

    @classmethod
    def from_config(cls) -> "StorageContext":
        return cls(
            upload_dir=config.UPLOAD_DIR,
            output_dir=config.OUTPUT_DIR,
            retention_hours=config.RETENTION_HOURS,
        )

    @classmethod
    def under(cls, root: PathLike, retention_hours: float = 24.0) -> "StorageContext":
        """Both directories beneath one root, e.g. a per-test tmp dir."""
        root = Path(root)
        return cls(upload_dir=root / "uploads", output_dir=root / "outputs", retention_hours=retention_hours)

    @property
    def directories(self) -> tuple[Path, Path]:
        return (self.upload_dir, self.output_dir)

    def ensure_directories(self) -> None:
        for d in self.directories:
            d.mkdir(parents=True, exist_ok=True)


class CleanupOutcome(str, Enum):
    REMOVED = "removed"
    MISSING = "missing"
    FAILED = "failed"


def _safe_name(filename: Optional[str]) -> tuple[str, str]:
    """Split an untrusted upload name into (stem, suffix) with no directory parts."""
    name = Path((filename or "").replace("\\", "/")).name
    path = Path(name)
    stem = "".join(c for c in path.stem if c.isalnum() or c in "._- ").strip() or "upload"
    suffix = path.suffix if path.suffix[1:].isalnum() else ""
    return stem[:100], suffix.lower()


def stage_upload(storage: StorageContext, data: bytes, original_filename: Optional[str]) -> Path:
    """Write upload bytes to ``<name>-<uuid><ext>`` in the upload dir and return the path."""
    storage.upload_dir.mkdir(parents=True, exist_ok=True)
    stem, suffix = _safe_name(original_filename)
    dest = storage.upload_dir / f"{stem}-{uuid.uuid4()}{suffix}"
    with open(dest, "xb") as f:
        f.write(data)
    logger.debug("Staged upload %s (%s bytes)", dest.name, len(data))
    return dest


def allocate_output_path(storage: StorageContext, input_path: PathLike, target_extension: str) -> Path:
    storage.output_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(input_path).stem
    ext = target_extension.lstrip(".")
    return storage.output_dir / f"{stem}-converted-{uuid.uuid4()}.{ext}"


def read_artifact(path: PathLike) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def remove(path: Optional[PathLike]) -> CleanupOutcome:
    """Delete an artifact. Safe to call twice; the second call reports MISSING."""
    if path is None:
        return CleanupOutcome.MISSING
    p = Path(path)
    try:
        p.unlink()
    except FileNotFoundError:
        return CleanupOutcome.MISSING
    except OSError as e:
        logger.warning("Could not remove %s: %s", p, e)
        return CleanupOutcome.FAILED
    return CleanupOutcome.REMOVED
