"""Transparent gzip compression"""

import asyncio
import gzip
import logging
import zlib

from ..errors import ReconstructionFailure

logger = logging.getLogger(__name__)

# Below this size gzip overhead outweighs the savings
MINIMUM_SIZE = 860

GZIP_MAGIC = b"\x1f\x8b\x08"


def is_gzip(data: bytes) -> bool:
    """Check for the gzip header (magic + deflate method)"""
    if not isinstance(data, (bytes, bytearray)) or len(data) < len(GZIP_MAGIC):
        return False
    return bytes(data[:3]) == GZIP_MAGIC


def compress(data: bytes) -> bytes:
    """
    Gzip data, but only when it is large enough to benefit
    mtime is pinned so identical input always yields identical output
    """
    if len(data) < MINIMUM_SIZE:
        return bytes(data)

    compressed = gzip.compress(bytes(data), mtime=0)
    logger.debug(f"Compressed {len(data)} -> {len(compressed)} bytes")
    return compressed


def decompress(data: bytes) -> bytes:
    """Gunzip data if it carries a gzip header, otherwise return it as is"""
    if not is_gzip(data):
        return bytes(data)

    try:
        return gzip.decompress(bytes(data))
    except (OSError, EOFError, zlib.error) as e:
        raise ReconstructionFailure(f"Failed to decompress payload: {e}") from e


async def compress_async(data: bytes) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, compress, data)


async def decompress_async(data: bytes) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, decompress, data)
