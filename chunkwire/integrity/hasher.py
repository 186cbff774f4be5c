"""Content addressing for transfers"""

import hashlib
import logging

from ..errors import InvalidInput, InvalidParameter

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha1"
MIN_DIGEST_BITS = 160


class ContentHasher:
    """
    Deterministic digest of a byte payload
    Used both as transfer id and as post-reassembly integrity check
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM):
        try:
            sample = hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise InvalidParameter(f"Unsupported hash algorithm: {algorithm}") from e

        if sample.digest_size * 8 < MIN_DIGEST_BITS:
            raise InvalidParameter(
                f"{algorithm} digest is shorter than {MIN_DIGEST_BITS} bits"
            )

        self.algorithm = algorithm

    def hash(self, data: bytes) -> str:
        """Hex digest of data"""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInput(f"Cannot hash {type(data).__name__}, bytes expected")

        return hashlib.new(self.algorithm, data).hexdigest()

    def verify(self, data: bytes, expected: str) -> bool:
        """Check that data hashes to expected"""
        actual = self.hash(data)
        if actual != expected:
            logger.debug(f"Digest mismatch: expected {expected}, got {actual}")
            return False
        return True


_default_hasher = ContentHasher()


def create_hash(data: bytes) -> str:
    """SHA-1 hex digest of data"""
    return _default_hasher.hash(data)


def verify_hash(data: bytes, expected: str) -> bool:
    return _default_hasher.verify(data, expected)
