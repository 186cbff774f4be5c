"""Benchmark smoke tests"""

import json

import pytest

from chunkwire.benchmark.benchmark import ChunkBenchmarker


class TestChunkBenchmarker:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("encoding", ["raw", "base64"])
    async def test_run(self, temp_dir, encoding):
        benchmarker = ChunkBenchmarker(temp_dir)

        result = await benchmarker.run(4096, 512, encoding=encoding, iterations=2)

        assert result.payload_size == 4096
        assert result.chunk_count > 1
        assert result.avg_split_ms >= 0
        assert benchmarker.results == [result]

    @pytest.mark.asyncio
    async def test_save_results(self, temp_dir, big_payload):
        benchmarker = ChunkBenchmarker(temp_dir)
        await benchmarker.run(len(big_payload), 1024, compress=False,
                              iterations=1, payload=big_payload)

        json_file = benchmarker.save_results()

        saved = json.loads(json_file.read_text())
        assert saved[0]['chunk_size'] == 1024
        assert saved[0]['compress'] is False
        assert list(temp_dir.glob("benchmark_*.csv"))
