"""
transfer/receiver.py - Chunk accumulation and reassembly
Single-transfer receiver with an id known up front, and a multi-transfer
receiver keyed by chunk id with per-transfer timeouts
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
import logging

from ..codec.compression import decompress_async
from ..codec.splitter import DEFAULT_ENCODING, Fragment, get_splitter
from ..errors import (
    AlreadyComplete, ChunkError, IdMismatch, IncompleteTransfer, InvalidIndex,
    InvalidParameter, MissingChunk, ReceiverClosed, ReconstructionFailure,
    TimeoutExpired, TransferCancelled
)
from ..integrity.hasher import create_hash
from .chunk import Chunk

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0  # seconds

# Largest integer exactly representable in an IEEE-754 double
MAX_SAFE_INTEGER = 2 ** 53 - 1


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_total(total, transfer_id: Optional[str] = None):
    if not _is_int(total) or total <= 0 or total > MAX_SAFE_INTEGER:
        raise InvalidParameter(
            f"total must be a positive integer up to {MAX_SAFE_INTEGER}, got {total!r}",
            transfer_id
        )


@dataclass
class TransferState:
    """Fragments received so far for one transfer id"""
    id: str
    total: int
    slots: Dict[int, Fragment] = field(default_factory=dict)
    timer: Optional[asyncio.TimerHandle] = None
    created_at: float = field(default_factory=time.time)

    @property
    def received(self) -> int:
        """Distinct indices stored so far"""
        return len(self.slots)

    @property
    def complete(self) -> bool:
        return self.received == self.total

    def check_index(self, index):
        if not _is_int(index) or index < 0 or index >= self.total:
            raise InvalidIndex(
                f"Invalid chunk index {index!r} for transfer {self.id} "
                f"(total {self.total})", self.id
            )

    def store(self, index: int, data: Fragment) -> bool:
        """
        Put data in its slot
        Returns False for a re-delivered index, which overwrites without counting
        """
        is_new = index not in self.slots
        self.slots[index] = data
        return is_new

    def missing(self, limit: Optional[int] = None) -> List[int]:
        """Indices not received yet, at most `limit` of them"""
        result = []
        for index in range(self.total):
            if index not in self.slots:
                result.append(index)
                if limit is not None and len(result) >= limit:
                    break
        return result

    def fragments(self) -> List[Fragment]:
        return [self.slots[index] for index in range(self.total)]


async def _reconstruct(state: TransferState, encoding: str) -> bytes:
    """Joiner -> decompression, every failure mapped to ReconstructionFailure"""
    try:
        joined = get_splitter(encoding).join(state.fragments())
        return await decompress_async(joined)
    except ReconstructionFailure as e:
        e.transfer_id = state.id
        raise
    except ChunkError as e:
        raise ReconstructionFailure(
            f"Failed to join transfer {state.id}: {e}", state.id
        ) from e


class TransferReceiver:
    """
    Receives the chunks of one transfer whose id and total are known
    Completion is queried synchronously with done()
    """

    def __init__(self, id: str, total: int, encoding: str = DEFAULT_ENCODING):
        _check_total(total, id)
        self.splitter = get_splitter(encoding)
        self.encoding = self.splitter.name
        self.state = TransferState(id=id, total=total)
        self._payload: Optional[bytes] = None

    @property
    def id(self) -> str:
        return self.state.id

    @property
    def total(self) -> int:
        return self.state.total

    def add_chunk(self, chunk: Chunk):
        """Store one chunk; raises on chunks this transfer cannot accept"""
        if chunk is None:
            raise MissingChunk("Missing chunk to add", self.id)

        if self.state.complete:
            raise AlreadyComplete(f"All chunks of {self.id} already received", self.id)

        if chunk.id != self.id or chunk.total != self.total:
            raise IdMismatch(
                f"Chunk {chunk.id}/{chunk.total} does not belong to "
                f"transfer {self.id}/{self.total}", self.id
            )

        self.state.check_index(chunk.index)
        self.splitter.check_fragment(chunk.data)

        if not self.state.store(chunk.index, chunk.data):
            logger.debug(f"Duplicate chunk {chunk.index} for {self.id}")

    def done(self) -> bool:
        return self.state.complete

    def missing(self, limit: Optional[int] = None) -> List[int]:
        return self.state.missing(limit)

    async def to_bytes(self) -> bytes:
        """Reassembled, decompressed payload"""
        if not self.done():
            raise IncompleteTransfer(
                f"Transfer {self.id} is missing chunks {self.missing(limit=20)}", self.id
            )

        if self._payload is None:
            self._payload = await _reconstruct(self.state, self.encoding)
        return self._payload

    async def to_string(self, encoding: str = 'utf-8') -> str:
        payload = await self.to_bytes()
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError as e:
            raise ReconstructionFailure(
                f"Payload of {self.id} is not valid {encoding}", self.id
            ) from e

    async def verify(self) -> bool:
        """True when the reassembled payload hashes to the transfer id"""
        payload = await self.to_bytes()
        return create_hash(payload) == self.id


@dataclass
class TransferEvent:
    """Outcome of one transfer, as delivered on the events queue"""
    transfer_id: Optional[str]
    payload: Optional[bytes] = None
    error: Optional[ChunkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


MessageListener = Callable[[str, bytes], Any]
ErrorListener = Callable[[ChunkError], Any]


class MultiTransferReceiver:
    """
    Accumulates chunks of many concurrent transfers keyed by chunk id
    Results and errors are delivered to registered listeners, and to the
    events queue when the receiver was built with events=True
    """

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT,
                 encoding: str = DEFAULT_ENCODING, verify: bool = False,
                 events: bool = False):
        if timeout is not None and (
                isinstance(timeout, bool) or not isinstance(timeout, (int, float))
                or timeout <= 0):
            raise InvalidParameter(f"timeout must be a positive number, got {timeout!r}")

        self.timeout = timeout
        self.splitter = get_splitter(encoding)
        self.encoding = self.splitter.name
        self.verify = verify

        self.transfers: Dict[str, TransferState] = {}
        self._events_enabled = events
        self._events: Optional[asyncio.Queue] = None
        self._tasks: Set[asyncio.Future] = set()
        self._message_listeners: List[MessageListener] = []
        self._error_listeners: List[ErrorListener] = []
        self._closed = False

    @classmethod
    def from_config(cls, config, events: bool = False) -> 'MultiTransferReceiver':
        return cls(timeout=config.timeout, encoding=config.encoding,
                   verify=config.verify, events=events)

    @property
    def events(self) -> Optional[asyncio.Queue]:
        """
        Queue of TransferEvent, None unless enabled
        Created on first use so it binds to the running loop
        """
        if not self._events_enabled:
            return None
        if self._events is None:
            self._events = asyncio.Queue()
        return self._events

    def on_message(self, listener: MessageListener):
        """Register listener(transfer_id, payload) for completed transfers"""
        self._message_listeners.append(listener)
        return listener

    def on_error(self, listener: ErrorListener):
        """Register listener(error) for timeouts and reconstruction failures"""
        self._error_listeners.append(listener)
        return listener

    def __contains__(self, transfer_id: str) -> bool:
        return transfer_id in self.transfers

    def __len__(self) -> int:
        return len(self.transfers)

    def pending(self) -> List[str]:
        return list(self.transfers)

    def get_state(self, transfer_id: str) -> Optional[TransferState]:
        return self.transfers.get(transfer_id)

    @property
    def closed(self) -> bool:
        return self._closed

    async def add_chunk(self, chunk: Chunk):
        """
        Accept one chunk; acceptance errors are raised here
        When the chunk completes its transfer, reassembly is awaited and
        the result is delivered to listeners. Delivery runs in a task owned
        by the receiver, so cancelling the caller does not lose the result.
        """
        if self._closed:
            raise ReceiverClosed("Receiver is closed")

        if chunk is None:
            raise MissingChunk("Missing chunk to add")

        state = self.transfers.get(chunk.id)

        if state is None:
            _check_total(chunk.total, chunk.id)
            state = TransferState(id=chunk.id, total=chunk.total)
            state.check_index(chunk.index)
            self.splitter.check_fragment(chunk.data)
            self._start(state)
        elif chunk.total != state.total:
            raise InvalidParameter(
                f"Chunk total {chunk.total!r} does not match {state.total} "
                f"for transfer {chunk.id}", chunk.id
            )
        else:
            state.check_index(chunk.index)
            self.splitter.check_fragment(chunk.data)

        if not state.store(chunk.index, chunk.data):
            logger.debug(f"Duplicate chunk {chunk.index} for {chunk.id}")

        if not state.complete:
            logger.debug(f"Transfer {chunk.id}: {state.received}/{state.total}")
            return

        self._finish(state)
        await asyncio.shield(self._spawn(self._deliver(state)))

    def _spawn(self, coro: Awaitable) -> asyncio.Future:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _start(self, state: TransferState):
        if self.timeout is not None:
            loop = asyncio.get_running_loop()
            state.timer = loop.call_later(self.timeout, self._expire, state.id)

        self.transfers[state.id] = state
        logger.debug(f"Started transfer {state.id} ({state.total} chunks)")

    def _finish(self, state: TransferState):
        if state.timer is not None:
            state.timer.cancel()
            state.timer = None
        self.transfers.pop(state.id, None)

    async def _deliver(self, state: TransferState):
        try:
            payload = await _reconstruct(state, self.encoding)
            if self.verify and create_hash(payload) != state.id:
                raise ReconstructionFailure(
                    f"Digest mismatch for transfer {state.id}", state.id
                )
        except ReconstructionFailure as e:
            logger.warning(f"Reconstruction of {state.id} failed: {e}")
            await self._notify_error(e)
            return

        logger.info(f"Transfer {state.id} complete ({len(payload)} bytes)")
        if self._events_enabled:
            self.events.put_nowait(TransferEvent(state.id, payload=payload))

        for listener in list(self._message_listeners):
            await self._call(listener, state.id, payload)

    def _expire(self, transfer_id: str):
        state = self.transfers.pop(transfer_id, None)
        if state is None:
            return

        state.timer = None
        logger.info(
            f"Transfer {transfer_id} timed out with {state.received}/{state.total} chunks"
        )
        error = TimeoutExpired(
            f"Timeout when receiving chunks \"{transfer_id}\"", transfer_id
        )
        self._spawn(self._notify_error(error))

    def cancel(self, transfer_id: str) -> bool:
        """Abandon a transfer now, as if its timeout fired"""
        state = self.transfers.get(transfer_id)
        if state is None:
            return False

        self._finish(state)
        logger.info(f"Transfer {transfer_id} cancelled")
        self._spawn(self._notify_error(
            TransferCancelled(f"Transfer \"{transfer_id}\" cancelled", transfer_id)
        ))
        return True

    def close(self):
        """Cancel every timer and pending notification, drop all in-flight transfers"""
        for state in self.transfers.values():
            if state.timer is not None:
                state.timer.cancel()
                state.timer = None

        if self.transfers:
            logger.info(f"Closing receiver with {len(self.transfers)} pending transfers")

        for task in list(self._tasks):
            task.cancel()

        self._tasks.clear()
        self.transfers.clear()
        self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def _notify_error(self, error: ChunkError):
        if self._events_enabled:
            self.events.put_nowait(TransferEvent(error.transfer_id, error=error))

        if not self._error_listeners:
            logger.error(f"Unhandled transfer error: {error}")

        for listener in list(self._error_listeners):
            await self._call(listener, error)

    async def _call(self, listener: Callable, *args):
        try:
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Listener {listener!r} failed: {e}", exc_info=True)
