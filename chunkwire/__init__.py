"""Split payloads into size-bounded chunks and reassemble them"""

from .errors import (
    ChunkError, InvalidParameter, InvalidInput, MissingChunk, IdMismatch,
    InvalidIndex, AlreadyComplete, IncompleteTransfer, ReceiverClosed,
    TimeoutExpired, TransferCancelled, ReconstructionFailure
)
from .config import ChunkConfig, load_config
from .integrity import ContentHasher, create_hash, verify_hash
from .codec import compress, decompress, get_splitter
from .transfer import (
    Chunk, create_chunks, create_chunks_async, create_chunks_from_file,
    join_chunks, TransferReceiver, MultiTransferReceiver, TransferEvent
)

__version__ = "1.0.0"


def create_receiver(id=None, total=None, **kwargs):
    """
    TransferReceiver when id and total are given,
    otherwise a MultiTransferReceiver
    """
    if id is not None or total is not None:
        return TransferReceiver(id, total, **kwargs)
    return MultiTransferReceiver(**kwargs)


__all__ = [
    'ChunkError',
    'InvalidParameter',
    'InvalidInput',
    'MissingChunk',
    'IdMismatch',
    'InvalidIndex',
    'AlreadyComplete',
    'IncompleteTransfer',
    'ReceiverClosed',
    'TimeoutExpired',
    'TransferCancelled',
    'ReconstructionFailure',
    'ChunkConfig',
    'load_config',
    'ContentHasher',
    'create_hash',
    'verify_hash',
    'compress',
    'decompress',
    'get_splitter',
    'Chunk',
    'create_chunks',
    'create_chunks_async',
    'create_chunks_from_file',
    'join_chunks',
    'create_receiver',
    'TransferReceiver',
    'MultiTransferReceiver',
    'TransferEvent'
]
