"""Signature corpus assembly and plugin discovery."""

from __future__ import annotations

from importlib import metadata
from typing import Iterable, List, Mapping, Sequence, Set

from .base import Signature
from .builtin import BUILTIN_PHRASES, builtin_signatures

_ENTRY_POINT_GROUP = "licaudit.signatures"


def discover_signatures(
    enabled: Sequence[str] | None = None,
    extra: Mapping[str, Sequence[str]] | None = None,
) -> List[Signature]:
    """Return the signature corpus, honoring optional enabled license names.

    Built-in signatures come first, then signatures published through the
    ``licaudit.signatures`` entry point group, then ``extra`` phrases keyed by
    license name (usually from ``.licaudit.yml``). When ``enabled`` is given,
    only signatures for those licenses are kept; naming a license that no
    source provides is an error.
    """

    enabled_map: dict[str, str] | None = None
    if enabled is not None:
        enabled_map = {name.lower(): name for name in enabled}

    corpus: List[Signature] = []
    seen: Set[Signature] = set()
    provided: Set[str] = set()

    def _add(signature: Signature) -> None:
        key = signature.license.lower()
        provided.add(key)
        if enabled_map is not None and key not in enabled_map:
            return
        if signature in seen:
            return
        corpus.append(signature)
        seen.add(signature)

    for signature in builtin_signatures():
        _add(signature)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to load signature entry point '{name}': {exc}") from exc
        for signature in _coerce_signatures(name, loaded):
            _add(signature)

    for license, phrases in (extra or {}).items():
        for text in phrases:
            _add(Signature.from_text(license, text))

    if enabled_map is not None:
        missing = sorted(
            original for key, original in enabled_map.items() if key not in provided
        )
        if missing:
            raise ValueError(f"Unknown licenses requested: {', '.join(missing)}")

    return corpus


def _coerce_signatures(name: str, obj: object) -> List[Signature]:
    """Accept a Signature iterable, a phrase mapping, or a factory returning either."""
    if callable(obj) and not isinstance(obj, type):
        obj = obj()
    if isinstance(obj, Mapping):
        return [
            Signature.from_text(str(license), str(text))
            for license, phrases in obj.items()
            for text in ([phrases] if isinstance(phrases, str) else phrases)
        ]
    if isinstance(obj, Iterable) and not isinstance(obj, (str, bytes)):
        items = list(obj)
        if all(isinstance(item, Signature) for item in items):
            return items
    raise TypeError(
        f"Signature entry point '{name}' must provide Signature objects or a phrase mapping"
    )


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BUILTIN_PHRASES",
    "Signature",
    "builtin_signatures",
    "discover_signatures",
]
