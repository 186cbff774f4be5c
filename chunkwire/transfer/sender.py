"""Sender side: payload -> chunks, and the stateless inverse"""

from pathlib import Path
from typing import List, Sequence, Union
import logging

import aiofiles

from ..codec.compression import compress as gzip_compress, compress_async, decompress_async
from ..codec.splitter import DEFAULT_ENCODING, Fragment, get_splitter
from ..errors import InvalidInput, ReconstructionFailure
from ..integrity.hasher import create_hash
from .chunk import Chunk

logger = logging.getLogger(__name__)


def _check_content(content):
    if not isinstance(content, (bytes, bytearray, memoryview)):
        raise InvalidInput(f"Content must be bytes, got {type(content).__name__}")


def _tag(transfer_id: str, fragments: List[Fragment]) -> List[Chunk]:
    total = len(fragments)
    return [
        Chunk(id=transfer_id, total=total, index=index, data=data)
        for index, data in enumerate(fragments)
    ]


def create_chunks(content: bytes, chunk_size: int, compress: bool = True,
                  encoding: str = DEFAULT_ENCODING) -> List[Chunk]:
    """
    Split content into chunks ready for transport
    The id is the digest of the uncompressed content
    """
    _check_content(content)
    splitter = get_splitter(encoding)
    splitter.validate_chunk_size(chunk_size)

    content = bytes(content)
    transfer_id = create_hash(content)
    payload = gzip_compress(content) if compress else content

    chunks = _tag(transfer_id, splitter.split(payload, chunk_size))
    logger.debug(f"Created {len(chunks)} chunks for {transfer_id} ({len(content)} bytes)")
    return chunks


async def create_chunks_async(content: bytes, chunk_size: int, compress: bool = True,
                              encoding: str = DEFAULT_ENCODING) -> List[Chunk]:
    """Same as create_chunks, with compression off the event loop"""
    _check_content(content)
    splitter = get_splitter(encoding)
    splitter.validate_chunk_size(chunk_size)

    content = bytes(content)
    transfer_id = create_hash(content)
    payload = await compress_async(content) if compress else content

    return _tag(transfer_id, splitter.split(payload, chunk_size))


async def create_chunks_from_file(path: Union[str, Path], chunk_size: int,
                                  compress: bool = True,
                                  encoding: str = DEFAULT_ENCODING) -> List[Chunk]:
    """Read a file and split its content"""
    async with aiofiles.open(path, 'rb') as f:
        content = await f.read()

    logger.info(f"Read {len(content)} bytes from {path}")
    return await create_chunks_async(content, chunk_size, compress, encoding)


async def join_chunks(chunks: Sequence[Chunk], encoding: str = DEFAULT_ENCODING,
                      verify: bool = False) -> bytes:
    """
    Rebuild the payload from a complete set of chunks
    Chunks may be given in any order
    """
    if not isinstance(chunks, (list, tuple)) or not chunks:
        raise InvalidInput("Expected a non-empty list of chunks")

    ordered = sorted(chunks, key=lambda c: c.index)
    transfer_id = ordered[0].id

    joined = get_splitter(encoding).join([c.data for c in ordered])
    content = await decompress_async(joined)

    if verify and create_hash(content) != transfer_id:
        raise ReconstructionFailure(
            f"Digest mismatch for transfer {transfer_id}", transfer_id
        )

    return content
