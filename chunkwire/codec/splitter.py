"""
codec/splitter.py - Size-bounded splitting strategies
Raw byte slices or base64 text, both behind the same Splitter interface
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple, Type, Union

from ..errors import InvalidInput, InvalidParameter, ReconstructionFailure

logger = logging.getLogger(__name__)

Fragment = Union[str, bytes]

# Largest UTF-8 encoded code point
MIN_TEXT_CHUNK_SIZE = 4


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_text_chunk_size(max_bytes: int):
    """Text chunks must be even and able to hold any single character"""
    if not _is_int(max_bytes) or max_bytes < MIN_TEXT_CHUNK_SIZE or max_bytes % 2 != 0:
        raise InvalidParameter(
            f"Chunk size must be an even integer of at least {MIN_TEXT_CHUNK_SIZE}, "
            f"got {max_bytes!r}"
        )


def split_text(text: str, max_bytes: int) -> List[str]:
    """
    Split text into chunks of at most max_bytes UTF-8 bytes each
    Characters are packed greedily and never split across chunks
    """
    if not isinstance(text, str):
        raise InvalidInput(f"Expected str, got {type(text).__name__}")

    validate_text_chunk_size(max_bytes)

    if not text:
        return [text]

    chunks: List[str] = []
    current: List[str] = []
    current_size = 0

    for char in text:
        size = len(char.encode('utf-8'))

        if current and current_size + size > max_bytes:
            chunks.append(''.join(current))
            current = []
            current_size = 0

        current.append(char)
        current_size += size

    chunks.append(''.join(current))
    return chunks


def join_text(chunks: Sequence[str]) -> str:
    if not isinstance(chunks, (list, tuple)):
        raise InvalidInput(f"Expected a list of chunks, got {type(chunks).__name__}")
    if not all(isinstance(c, str) for c in chunks):
        raise InvalidInput("Text chunks must all be str")
    return ''.join(chunks)


class Splitter(ABC):
    """Partitions a payload into fragments no larger than chunk_size bytes"""

    name: str = ""
    fragment_types: Tuple[type, ...] = ()

    @abstractmethod
    def validate_chunk_size(self, chunk_size: int):
        """Raise InvalidParameter when chunk_size is unusable"""

    @abstractmethod
    def split(self, data: bytes, chunk_size: int) -> List[Fragment]:
        """Split data into ordered fragments"""

    @abstractmethod
    def join(self, fragments: Sequence[Fragment]) -> bytes:
        """Rebuild the payload from fragments in index order"""

    def check_fragment(self, data):
        """Raise InvalidInput unless data is a fragment this strategy produces"""
        if not isinstance(data, self.fragment_types):
            raise InvalidInput(
                f"{self.name} fragments must be "
                f"{' or '.join(t.__name__ for t in self.fragment_types)}, "
                f"got {type(data).__name__}"
            )

    @staticmethod
    def _check_payload(data):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInput(f"Payload must be bytes, got {type(data).__name__}")

    @staticmethod
    def _check_fragments(fragments):
        if not isinstance(fragments, (list, tuple)):
            raise InvalidInput(
                f"Expected a list of fragments, got {type(fragments).__name__}"
            )


class RawSplitter(Splitter):
    """Consecutive byte slices, the last one possibly shorter"""

    name = "raw"
    fragment_types = (bytes, bytearray)

    def validate_chunk_size(self, chunk_size: int):
        if not _is_int(chunk_size) or chunk_size <= 0:
            raise InvalidParameter(
                f"Chunk size must be a positive integer, got {chunk_size!r}"
            )

    def split(self, data: bytes, chunk_size: int) -> List[bytes]:
        self._check_payload(data)
        self.validate_chunk_size(chunk_size)

        data = bytes(data)
        if len(data) <= chunk_size:
            return [data]

        return [data[start:start + chunk_size] for start in range(0, len(data), chunk_size)]

    def join(self, fragments: Sequence[bytes]) -> bytes:
        self._check_fragments(fragments)

        if not all(isinstance(f, (bytes, bytearray)) for f in fragments):
            raise InvalidInput("Raw fragments must all be bytes")

        return b''.join(fragments)


class Base64Splitter(Splitter):
    """
    Base64 encode first, then split the text
    Every fragment is printable ASCII, so chunk_size is the exact wire size
    """

    name = "base64"
    fragment_types = (str,)

    def validate_chunk_size(self, chunk_size: int):
        validate_text_chunk_size(chunk_size)

    def split(self, data: bytes, chunk_size: int) -> List[str]:
        self._check_payload(data)
        self.validate_chunk_size(chunk_size)

        encoded = base64.b64encode(bytes(data)).decode('ascii')
        return split_text(encoded, chunk_size)

    def join(self, fragments: Sequence[str]) -> bytes:
        encoded = join_text(fragments)

        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ReconstructionFailure(f"Invalid base64 data: {e}") from e


SPLITTERS: Dict[str, Type[Splitter]] = {
    RawSplitter.name: RawSplitter,
    Base64Splitter.name: Base64Splitter,
}

DEFAULT_ENCODING = Base64Splitter.name


def get_splitter(name: str = DEFAULT_ENCODING) -> Splitter:
    """Look up a splitting strategy by name"""
    try:
        return SPLITTERS[name]()
    except KeyError:
        raise InvalidParameter(
            f"Unknown encoding {name!r}, expected one of {sorted(SPLITTERS)}"
        ) from None
