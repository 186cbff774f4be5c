from .chunk import Chunk
from .sender import create_chunks, create_chunks_async, create_chunks_from_file, join_chunks
from .receiver import (
    TransferState, TransferReceiver, MultiTransferReceiver, TransferEvent, DEFAULT_TIMEOUT
)

__all__ = [
    'Chunk',
    'create_chunks',
    'create_chunks_async',
    'create_chunks_from_file',
    'join_chunks',
    'TransferState',
    'TransferReceiver',
    'MultiTransferReceiver',
    'TransferEvent',
    'DEFAULT_TIMEOUT'
]
