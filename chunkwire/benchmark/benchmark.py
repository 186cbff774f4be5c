import asyncio
import os
import time
import psutil
import json
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, asdict
import logging

from ..codec.splitter import DEFAULT_ENCODING
from ..transfer.receiver import MultiTransferReceiver
from ..transfer.sender import create_chunks

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Single benchmark result"""
    encoding: str
    compress: bool
    payload_size: int
    chunk_size: int
    iterations: int
    chunk_count: int
    wire_bytes: int
    avg_split_ms: float
    avg_reassemble_ms: float
    memory_mb_avg: float
    memory_mb_max: float
    timestamp: float


class ChunkBenchmarker:
    """
    Splitting and reassembly throughput
    Measures timings, chunk overhead and resident memory growth
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.results: List[BenchmarkResult] = []

        # Process for resource monitoring
        self.process = psutil.Process()

    async def run(self, payload_size: int, chunk_size: int,
                  encoding: str = DEFAULT_ENCODING, compress: bool = True,
                  iterations: int = 10,
                  payload: Optional[bytes] = None) -> BenchmarkResult:
        """Split and reassemble the same payload `iterations` times"""
        logger.info(
            f"Benchmarking {encoding} chunks of {chunk_size} bytes "
            f"for a {payload_size} byte payload"
        )

        if payload is None:
            # Half random, half repetitive so compression has something to do
            half = payload_size // 2
            payload = os.urandom(half) + b"chunkwire " * ((payload_size - half) // 10 + 1)
            payload = payload[:payload_size]

        split_times = []
        reassemble_times = []
        memory_usages = []
        chunk_count = 0
        wire_bytes = 0

        for _ in range(iterations):
            mem_before = self.process.memory_info().rss / 1024 / 1024

            start = time.perf_counter()
            chunks = create_chunks(payload, chunk_size, compress=compress, encoding=encoding)
            split_times.append((time.perf_counter() - start) * 1000)

            chunk_count = len(chunks)
            wire_bytes = sum(len(c.data) for c in chunks)

            receiver = MultiTransferReceiver(timeout=None, encoding=encoding, verify=True,
                                             events=True)
            start = time.perf_counter()
            for chunk in reversed(chunks):
                await receiver.add_chunk(chunk)
            event = receiver.events.get_nowait()
            reassemble_times.append((time.perf_counter() - start) * 1000)
            receiver.close()

            assert event.ok and event.payload == payload, "Round trip mismatch"

            mem_after = self.process.memory_info().rss / 1024 / 1024
            memory_usages.append(mem_after - mem_before)

        result = BenchmarkResult(
            encoding=encoding,
            compress=compress,
            payload_size=len(payload),
            chunk_size=chunk_size,
            iterations=iterations,
            chunk_count=chunk_count,
            wire_bytes=wire_bytes,
            avg_split_ms=sum(split_times) / len(split_times),
            avg_reassemble_ms=sum(reassemble_times) / len(reassemble_times),
            memory_mb_avg=sum(memory_usages) / len(memory_usages),
            memory_mb_max=max(memory_usages),
            timestamp=time.time()
        )

        self.results.append(result)
        await asyncio.sleep(0)
        return result

    async def run_matrix(self, payload_size: int, chunk_sizes: List[int],
                         iterations: int = 5):
        """Every encoding/compression combination for each chunk size"""
        total = len(chunk_sizes) * 4
        count = 0

        for chunk_size in chunk_sizes:
            for encoding in ('raw', 'base64'):
                for compress in (True, False):
                    count += 1
                    logger.info(f"Progress: {count}/{total}")
                    await self.run(payload_size, chunk_size, encoding, compress, iterations)

        logger.info(f"Completed {len(self.results)} benchmarks")

    def save_results(self) -> Path:
        """Save benchmark results to JSON and CSV"""
        timestamp = int(time.time())

        json_file = self.output_dir / f"benchmark_{timestamp}.json"
        with open(json_file, 'w') as f:
            json.dump(
                [asdict(r) for r in self.results],
                f,
                indent=2
            )
        logger.info(f"Saved results to {json_file}")

        csv_file = self.output_dir / f"benchmark_{timestamp}.csv"
        with open(csv_file, 'w') as f:
            if self.results:
                fields = asdict(self.results[0]).keys()
                f.write(','.join(fields) + '\n')

                for result in self.results:
                    values = [str(v) for v in asdict(result).values()]
                    f.write(','.join(values) + '\n')

        logger.info(f"Saved CSV to {csv_file}")
        return json_file
