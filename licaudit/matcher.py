"""Multi-signature phrase matching over normalized token streams.

The matcher is a token-level Aho-Corasick automaton: every signature phrase
is inserted into a trie keyed by whole tokens, failure links let the scan
fall back to the longest phrase prefix that is still alive, and each state
carries the licenses whose phrases end there. A scan is one pass over the
tokens with no backtracking, so its cost depends on file length only.
"""

from __future__ import annotations

from collections import deque
from typing import BinaryIO, Dict, Iterable, List, Set, Tuple

from .logging import get_logger
from .signatures import Signature
from .tokenizer import DEFAULT_QUEUE_SIZE, TokenPipe

logger = get_logger("matcher")


class SignatureMatcher:
    """Detects every configured signature in a single pass over tokens."""

    def __init__(self, signatures: Iterable[Signature]) -> None:
        self._signatures: Tuple[Signature, ...] = tuple(signatures)
        self._goto: List[Dict[str, int]] = [{}]
        self._fail: List[int] = [0]
        self._output: List[Tuple[str, ...]] = [()]
        for signature in self._signatures:
            self._insert(signature)
        self._link()
        self._licenses = frozenset(signature.license for signature in self._signatures)
        logger.debug(
            "Built matcher with %d signatures over %d states",
            len(self._signatures),
            len(self._goto),
        )

    @property
    def signatures(self) -> Tuple[Signature, ...]:
        return self._signatures

    @property
    def licenses(self) -> frozenset[str]:
        return self._licenses

    def scan(self, tokens: Iterable[str]) -> List[str]:
        """Return distinct license names in the order their phrases complete."""
        goto = self._goto
        fail = self._fail
        output = self._output

        found: List[str] = []
        seen: Set[str] = set()
        state = 0
        for token in tokens:
            while state and token not in goto[state]:
                state = fail[state]
            state = goto[state].get(token, 0)
            for license in output[state]:
                if license not in seen:
                    seen.add(license)
                    found.append(license)
            if len(seen) == len(self._licenses):
                break
        return found

    def _insert(self, signature: Signature) -> None:
        state = 0
        for token in signature.phrase:
            nxt = self._goto[state].get(token)
            if nxt is None:
                nxt = len(self._goto)
                self._goto[state][token] = nxt
                self._goto.append({})
                self._fail.append(0)
                self._output.append(())
            state = nxt
        if signature.license not in self._output[state]:
            self._output[state] = self._output[state] + (signature.license,)

    def _link(self) -> None:
        pending: deque[int] = deque(self._goto[0].values())
        while pending:
            state = pending.popleft()
            for token, child in self._goto[state].items():
                pending.append(child)
                fallback = self._fail[state]
                while fallback and token not in self._goto[fallback]:
                    fallback = self._fail[fallback]
                self._fail[child] = self._goto[fallback].get(token, 0)
                inherited = tuple(
                    license
                    for license in self._output[self._fail[child]]
                    if license not in self._output[child]
                )
                if inherited:
                    self._output[child] = self._output[child] + inherited


def identify_licenses(
    stream: BinaryIO,
    matcher: SignatureMatcher,
    *,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> List[str]:
    """Tokenize ``stream`` on a producer thread and scan it with ``matcher``.

    Read and decode failures surface as :class:`~licaudit.tokenizer.TokenizeError`.
    """
    with TokenPipe(stream, maxsize=queue_size) as pipe:
        return matcher.scan(pipe)


__all__ = ["SignatureMatcher", "identify_licenses"]
