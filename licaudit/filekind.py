"""Best-effort kind inference for files nothing else could classify."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

from .logging import get_logger

logger = get_logger("filekind")

_SNIFF_BYTES = 8 * 1024

_KIND_BY_SUFFIX: Dict[str, str] = {
    ".png": "Image",
    ".jpg": "Image",
    ".jpeg": "Image",
    ".gif": "Image",
    ".bmp": "Image",
    ".ico": "Image",
    ".webp": "Image",
    ".tif": "Image",
    ".tiff": "Image",
    ".svg": "Image",
    ".ttf": "Font",
    ".otf": "Font",
    ".woff": "Font",
    ".woff2": "Font",
    ".eot": "Font",
    ".zip": "Archive",
    ".gz": "Archive",
    ".tgz": "Archive",
    ".tar": "Archive",
    ".bz2": "Archive",
    ".xz": "Archive",
    ".jar": "Archive",
    ".rpm": "Archive",
    ".pdf": "Document",
    ".mp3": "Media",
    ".mp4": "Media",
    ".wav": "Media",
    ".ogg": "Media",
}


class KindInferrer:
    """Guess a kind tag from the file suffix, then from its leading bytes."""

    def __init__(self, extra: Mapping[str, str] | None = None) -> None:
        self._kinds = dict(_KIND_BY_SUFFIX)
        for suffix, kind in (extra or {}).items():
            key = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
            self._kinds[key] = kind

    def infer(self, root: Path, path: str) -> Optional[str]:
        suffix = Path(path).suffix.lower()
        kind = self._kinds.get(suffix)
        if kind is not None:
            return kind
        return self._sniff(root / path)

    def _sniff(self, path: Path) -> Optional[str]:
        try:
            with path.open("rb") as handle:
                head = handle.read(_SNIFF_BYTES)
        except OSError as exc:
            logger.debug("Unable to sniff %s: %s", path, exc)
            return None
        if b"\x00" in head:
            return "Binary"
        return None


__all__ = ["KindInferrer"]
