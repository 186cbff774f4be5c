from .benchmark import ChunkBenchmarker, BenchmarkResult

__all__ = [
    'ChunkBenchmarker',
    'BenchmarkResult'
]
