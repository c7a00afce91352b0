"""Position-based classification of a packed bundle stream.

A browser-pack style stream always has the same shape::

    chunk 0        runtime prelude + "("
    chunk 1        "{"
    chunk 2..N+1   one chunk per module, in descriptor order
    chunk N+2..    trailing wrapper ("},{},[entries])" and friends)

Every module chunk except the first starts with a ``,`` separator. The
classifier normalises the first one so module units can be concatenated in
any order, and finalises the wrapper fragments so that
``prelude + modules + postlude`` is valid for any subset of modules: the
prelude gains a ``0:[]`` placeholder entry for the leading separator to
follow, and the postlude gains the closing ``;``.

Classification never looks at chunk content; only the running index and the
descriptor count decide where a chunk goes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

from bundle_splitter.units import (
    POSTLUDE_FILE,
    POSTLUDE_LABEL,
    PRELUDE_FILE,
    PRELUDE_LABEL,
    DescriptorSequencingError,
    ModuleDescriptor,
    OutputUnit,
)

logger = logging.getLogger(__name__)

PRELUDE_CHUNKS = 2
SEPARATOR = b","
PRELUDE_PLACEHOLDER = b"0:[]"
POSTLUDE_TERMINATOR = b";"

Chunk = bytes | bytearray | memoryview | str


class Zone(Enum):
    PRELUDE = "prelude"
    MODULES = "modules"
    POSTLUDE = "postlude"


def zone_for(index: int, module_count: int) -> Zone:
    """Return the zone of the chunk at ``index`` in a stream of ``module_count`` modules."""
    if index < PRELUDE_CHUNKS:
        return Zone.PRELUDE
    if index - PRELUDE_CHUNKS >= module_count:
        return Zone.POSTLUDE
    return Zone.MODULES


def _as_bytes(chunk: Chunk) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


def normalize_first_module(content: bytes) -> bytes:
    """Give the first module chunk the leading separator the others already carry."""
    return SEPARATOR + content


class ChunkClassifier:
    """Single forward pass over a chunk stream.

    ``descriptors`` is read, never modified. It may still be a live list when
    the classifier is created, but it must be complete by the time the first
    module chunk (index 2) arrives. Passing ``module_count`` declares how many
    modules the stream holds; a module chunk whose descriptor is missing then
    raises :class:`DescriptorSequencingError` instead of silently being
    treated as postlude.
    """

    def __init__(
        self,
        descriptors: Sequence[ModuleDescriptor],
        module_count: int | None = None,
    ) -> None:
        self._descriptors = descriptors
        self._module_count = module_count
        self._index = 0
        self._prelude = bytearray()
        self._postlude = bytearray()
        self._finalized = False

    @property
    def index(self) -> int:
        """Position of the next chunk to be fed."""
        return self._index

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def module_count(self) -> int:
        if self._module_count is not None:
            return self._module_count
        return len(self._descriptors)

    def _check_collection_closed(self) -> None:
        if not getattr(self._descriptors, "closed", True):
            raise DescriptorSequencingError(
                f"chunk {self._index} reached while module descriptors are still being collected"
            )

    def _descriptor(self, position: int) -> ModuleDescriptor:
        try:
            return self._descriptors[position]
        except IndexError:
            raise DescriptorSequencingError(
                f"chunk {self._index} is module #{position} but only "
                f"{len(self._descriptors)} descriptor(s) were collected"
            ) from None

    def feed(self, chunk: Chunk) -> OutputUnit | None:
        """Classify one chunk; return a module unit or ``None`` for wrapper chunks."""
        if self._finalized:
            raise RuntimeError("classifier already finalized")
        if self._index >= PRELUDE_CHUNKS:
            self._check_collection_closed()
        index = self._index
        zone = zone_for(index, self.module_count)
        content = _as_bytes(chunk)
        unit: OutputUnit | None = None
        if zone is Zone.PRELUDE:
            self._prelude += content
        elif zone is Zone.POSTLUDE:
            self._postlude += content
        else:
            position = index - PRELUDE_CHUNKS
            descriptor = self._descriptor(position)
            if position == 0:
                content = normalize_first_module(content)
            unit = OutputUnit.for_module(descriptor, content)
            logger.debug(
                "chunk %d -> module %r (%s)", index, descriptor.id, descriptor.source_label
            )
        self._index = index + 1
        return unit

    def finish(self) -> tuple[OutputUnit, OutputUnit]:
        """Finalize the wrapper accumulators and return ``(prelude, postlude)``."""
        if self._finalized:
            raise RuntimeError("classifier already finalized")
        self._finalized = True
        prelude = bytes(self._prelude + PRELUDE_PLACEHOLDER)
        postlude = bytes(self._postlude + POSTLUDE_TERMINATOR)
        if self._index < PRELUDE_CHUNKS:
            logger.debug("stream ended after %d chunk(s); prelude is incomplete", self._index)
        return (
            OutputUnit(PRELUDE_FILE, PRELUDE_LABEL, prelude),
            OutputUnit(POSTLUDE_FILE, POSTLUDE_LABEL, postlude),
        )


def split_chunks(
    chunks: Iterable[Chunk],
    descriptors: Sequence[ModuleDescriptor],
    module_count: int | None = None,
) -> Iterator[OutputUnit]:
    """Yield module units as they are classified, then the prelude and postlude.

    The wrapper units are only produced once ``chunks`` is exhausted; a
    consumer that stops early gets a partial, non-reconstructable result.
    """
    classifier = ChunkClassifier(descriptors, module_count)
    for chunk in chunks:
        unit = classifier.feed(chunk)
        if unit is not None:
            yield unit
    yield from classifier.finish()


__all__ = [
    "ChunkClassifier",
    "PRELUDE_CHUNKS",
    "PRELUDE_PLACEHOLDER",
    "POSTLUDE_TERMINATOR",
    "SEPARATOR",
    "Zone",
    "normalize_first_module",
    "split_chunks",
    "zone_for",
]
