"""Signature value type shared by the built-in corpus and plugins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..tokenizer import normalize_phrase


@dataclass(frozen=True)
class Signature:
    """A license name and the normalized phrase that identifies it."""

    license: str
    phrase: Tuple[str, ...]

    @classmethod
    def from_text(cls, license: str, text: str) -> "Signature":
        phrase = normalize_phrase(text)
        if not phrase:
            raise ValueError(f"Signature for {license!r} normalizes to an empty phrase")
        return cls(license=license, phrase=phrase)

    def __len__(self) -> int:
        return len(self.phrase)
