"""Streaming word tokenizer feeding the signature matcher."""

from __future__ import annotations

import codecs
import queue
import string
import threading
from typing import BinaryIO, Iterator, List, Optional

from .logging import get_logger

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_QUEUE_SIZE = 32

# ASCII punctuation plus the typographic quotes and dashes that show up in
# pasted license text.
_PUNCTUATION = string.punctuation + "‘’“”«»–—…©"

_CLOSED = object()

logger = get_logger("tokenizer")


class TokenizeError(OSError):
    """Raised to the consumer when the underlying stream failed mid-read."""


def normalize_token(word: str) -> str:
    """Lower-case ``word`` and strip leading/trailing punctuation."""
    return word.lower().strip(_PUNCTUATION)


def normalize_phrase(text: str) -> tuple[str, ...]:
    """Normalize a signature phrase exactly like file contents are tokenized."""
    tokens = (normalize_token(word) for word in text.split())
    return tuple(token for token in tokens if token)


def _emit(word: str) -> Optional[str]:
    return normalize_token(word) or None


def iter_tokens(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
    """Yield normalized tokens from a binary stream, reading it in chunks.

    Bytes are decoded as UTF-8 (with replacement) before splitting, so
    Unicode spaces such as U+00A0 separate words just like ASCII whitespace.
    A word or a multi-byte character split across two chunks is carried over
    and emitted once it is complete. Errors raised by ``stream.read``
    propagate to the caller.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        data = pending + decoder.decode(chunk)
        words = data.split()
        if words and not data[-1:].isspace():
            pending = words.pop()
        else:
            pending = ""
        for word in words:
            token = _emit(word)
            if token is not None:
                yield token
    pending += decoder.decode(b"", final=True)
    for word in pending.split():
        token = _emit(word)
        if token is not None:
            yield token


class TokenPipe:
    """Run :func:`iter_tokens` on a producer thread behind a bounded queue.

    The queue applies backpressure: a full queue blocks the producer and an
    empty, still-open queue blocks the consumer. End of input is signalled by
    closing the queue with a sentinel. Any failure on the producer
    side is delivered to the consumer, wrapped in :class:`TokenizeError`,
    after every token produced before it.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        maxsize: int = DEFAULT_QUEUE_SIZE,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        name: str = "licaudit-tokenizer",
    ) -> None:
        if maxsize < 1:
            raise ValueError("TokenPipe requires maxsize >= 1")
        self._stream = stream
        self._chunk_size = chunk_size
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._abandoned = threading.Event()
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._produce, name=name, daemon=True)
        self._started = False

    def __iter__(self) -> Iterator[str]:
        if not self._started:
            self._started = True
            self._thread.start()
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                break
            yield item  # type: ignore[misc]
        self._thread.join()
        if self._error is not None:
            raise TokenizeError(str(self._error)) from self._error

    def close(self) -> None:
        """Abandon the pipe; the producer stops at its next token."""
        self._abandoned.set()
        drained: List[object] = []
        while self._thread.is_alive():
            try:
                drained.append(self._queue.get(timeout=0.05))
            except queue.Empty:
                continue
        if drained:
            logger.debug("Discarded %d queued tokens on close", len(drained))

    def __enter__(self) -> "TokenPipe":
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._started:
            self.close()

    def _put(self, item: object) -> bool:
        while not self._abandoned.is_set():
            try:
                self._queue.put(item, timeout=0.05)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        try:
            for token in iter_tokens(self._stream, self._chunk_size):
                if not self._put(token):
                    return
        except BaseException as exc:
            self._error = exc
        finally:
            self._put(_CLOSED)


__all__ = [
    "DEFAULT_QUEUE_SIZE",
    "TokenPipe",
    "TokenizeError",
    "iter_tokens",
    "normalize_phrase",
    "normalize_token",
]
