"""Exception hierarchy for chunking and reassembly"""

from typing import Optional


class ChunkError(Exception):
    """Base class for every chunkwire failure"""

    def __init__(self, message: str, transfer_id: Optional[str] = None):
        super().__init__(message)
        self.transfer_id = transfer_id


class InvalidParameter(ChunkError, ValueError):
    """Bad chunk size, total or configuration value"""


class InvalidInput(ChunkError, TypeError):
    """Payload or fragments of the wrong type"""


class MissingChunk(ChunkError):
    """add_chunk() called without a chunk"""


class IdMismatch(ChunkError):
    """Chunk belongs to another transfer than the one the receiver is bound to"""


class InvalidIndex(ChunkError):
    """Chunk index outside [0, total)"""


class AlreadyComplete(ChunkError):
    """Transfer already received every chunk"""


class IncompleteTransfer(ChunkError):
    """Reassembly requested before every chunk arrived"""


class ReceiverClosed(ChunkError):
    """Receiver was closed and no longer accepts chunks"""


class TimeoutExpired(ChunkError):
    """Transfer abandoned because its chunks did not arrive in time"""


class TransferCancelled(ChunkError):
    """Transfer abandoned on request"""


class ReconstructionFailure(ChunkError):
    """Joining, decompression or digest verification failed"""
