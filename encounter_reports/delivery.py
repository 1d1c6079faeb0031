from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from itertools import chain, count
from pathlib import Path
from typing import Protocol

from . import config
from .domain import Artifact
from .errors import DeliveryError


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[\x00-\x1f<>:"|?*]')


@dataclass(frozen=True)
class DeliveryResult:
    path: Path
    size: int


class ArtifactDelivery(Protocol):
    def deliver(self, artifact: Artifact) -> DeliveryResult: ...


def safe_filename(name: str, default: str = config.DEFAULT_ARTIFACT_NAME) -> str:
    # Keep only the last path component; servers don't get to pick directories
    base = re.split(r"[\\/]", name)[-1]
    base = _UNSAFE_CHARS.sub("_", base).strip().strip(".")
    return base or default


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(f"Could not remove incomplete file {path}: {exc}")


class FileSystemDelivery:
    """Save artifacts into a download directory, browser style.

    Existing files are kept; a new copy becomes ``name (1).pdf`` and so on
    unless ``overwrite`` is set. Content goes through a hidden ``.part`` file
    and is moved into place only once fully written.
    """

    def __init__(self, output_dir: Path | str = config.REPORT_OUTPUT_DIR, *, overwrite: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.overwrite = overwrite

    def _claim(self, name: str) -> Path:
        """Create an empty placeholder under the first free name."""
        stem, suffix = Path(name).stem, Path(name).suffix
        candidates = chain([name], (f"{stem} ({n}){suffix}" for n in count(1)))
        for candidate in candidates:
            path = self.output_dir / candidate
            try:
                path.open("xb").close()
            except FileExistsError:
                continue
            return path

    def deliver(self, artifact: Artifact) -> DeliveryResult:
        name = safe_filename(artifact.suggested_name)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / name if self.overwrite else self._claim(name)
        except OSError as exc:
            raise DeliveryError(f"Could not save {name} to {self.output_dir}: {exc}") from exc

        partial = path.with_name(f".{path.name}.part")
        try:
            partial.write_bytes(artifact.content)
            os.replace(partial, path)
        except OSError as exc:
            _discard(partial)
            if not self.overwrite:
                _discard(path)
            raise DeliveryError(f"Could not save {name} to {self.output_dir}: {exc}") from exc

        logger.info(f"Saved {artifact.size} bytes to {path.resolve()}")
        return DeliveryResult(path=path, size=artifact.size)


__all__ = ["ArtifactDelivery", "DeliveryResult", "FileSystemDelivery", "safe_filename"]
