import asyncio
import argparse
import logging
import sys
from pathlib import Path

from chunkwire.config import load_config
from chunkwire.errors import ChunkError
from chunkwire.transfer.chunk import Chunk
from chunkwire.transfer.receiver import MultiTransferReceiver
from chunkwire.transfer.sender import create_chunks_from_file
from chunkwire.benchmark.benchmark import ChunkBenchmarker

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger(__name__)


def build_config(args):
    return load_config(
        args.config,
        chunk_size=args.chunk_size,
        encoding=args.encoding,
        timeout=args.timeout,
        compress=False if args.no_compress else None,
        verify=True if args.verify else None
    )


async def run_split(args):
    """Write one JSON chunk per line"""
    config = build_config(args)

    chunks = await create_chunks_from_file(
        args.input,
        config.chunk_size,
        compress=config.compress,
        encoding=config.encoding
    )

    lines = '\n'.join(chunk.to_json() for chunk in chunks) + '\n'
    if args.output:
        Path(args.output).write_text(lines)
    else:
        sys.stdout.write(lines)

    logger.info(f"Split {args.input} into {len(chunks)} chunks (id {chunks[0].id})")


async def run_join(args):
    """Read JSON chunk lines and write every completed payload"""
    config = build_config(args)
    output_dir = Path(args.output or '.')
    output_dir.mkdir(parents=True, exist_ok=True)

    receiver = MultiTransferReceiver.from_config(config)
    failures = []

    @receiver.on_message
    def write_payload(transfer_id, payload):
        target = output_dir / transfer_id
        target.write_bytes(payload)
        logger.info(f"Wrote {len(payload)} bytes to {target}")

    @receiver.on_error
    def record_failure(error):
        failures.append(error)
        logger.error(f"Transfer failed: {error}")

    source = open(args.input, 'r') if args.input != '-' else sys.stdin
    try:
        for line in source:
            line = line.strip()
            if not line:
                continue
            await receiver.add_chunk(Chunk.from_json(line))
    finally:
        if source is not sys.stdin:
            source.close()

    for transfer_id in receiver.pending():
        state = receiver.get_state(transfer_id)
        logger.warning(
            f"Incomplete transfer {transfer_id}: missing chunks {state.missing(limit=20)}"
        )
    receiver.close()

    if failures:
        raise ChunkError(f"{len(failures)} transfers failed")


async def run_benchmark(args):
    """Run benchmark mode"""
    logger.info("=== Starting chunkwire benchmark ===")

    benchmarker = ChunkBenchmarker(output_dir=Path(args.output or './benchmarks'))

    if args.all:
        await benchmarker.run_matrix(
            args.payload_size, [256, 1024, 16 * 1024], iterations=args.iterations
        )
    else:
        config = build_config(args)
        await benchmarker.run(
            args.payload_size,
            config.chunk_size,
            encoding=config.encoding,
            compress=config.compress,
            iterations=args.iterations
        )

    benchmarker.save_results()

    for result in benchmarker.results:
        logger.info(
            f"{result.encoding:>6} compress={result.compress!s:<5} "
            f"chunk={result.chunk_size}: {result.chunk_count} chunks, "
            f"split {result.avg_split_ms:.2f} ms, reassemble {result.avg_reassemble_ms:.2f} ms"
        )


def create_parser():
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        description='chunkwire - split payloads into size-bounded chunks and join them back',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Split a file into JSON chunk lines
  python main.py split --input photo.jpg --output photo.chunks --chunk-size 1024

  # Reassemble every transfer found in a chunk file
  python main.py join --input photo.chunks --output ./received

  # Run benchmarks
  python main.py benchmark --all
        """
    )

    parser.add_argument(
        'mode',
        choices=['split', 'join', 'benchmark'],
        help='Execution mode'
    )
    parser.add_argument(
        '--input',
        default='-',
        help='Input file, "-" for stdin when joining (default: -)'
    )
    parser.add_argument(
        '--output',
        default=None,
        help='Output file (split) or directory (join, benchmark)'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='YAML config file'
    )

    # Chunking arguments
    parser.add_argument(
        '--chunk-size',
        type=int,
        default=None,
        help='Maximum bytes per chunk (default: 16384)'
    )
    parser.add_argument(
        '--encoding',
        default=None,
        choices=['base64', 'raw'],
        help='Fragment encoding (default: base64)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Seconds to wait for a transfer to complete (default: 60)'
    )
    parser.add_argument(
        '--no-compress',
        action='store_true',
        help='Never gzip the payload'
    )
    parser.add_argument(
        '--verify',
        action='store_true',
        help='Check reassembled payloads against their digest'
    )

    # Benchmark-specific arguments
    parser.add_argument(
        '--payload-size',
        type=int,
        default=1024 * 1024,
        help='Benchmark payload size in bytes (default: 1048576)'
    )
    parser.add_argument(
        '--iterations',
        type=int,
        default=10,
        help='Number of benchmark iterations (default: 10)'
    )
    parser.add_argument(
        '--all',
        action='store_true',
        help='Benchmark every encoding/compression combination'
    )

    # Logging
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Minimal output'
    )

    return parser


async def main():
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()

    # Adjust logging level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.mode == 'split' and args.input == '-':
        parser.error('split needs --input')

    try:
        if args.mode == 'split':
            await run_split(args)
        elif args.mode == 'join':
            await run_join(args)
        elif args.mode == 'benchmark':
            await run_benchmark(args)
    except KeyboardInterrupt:
        logger.info("\nShutdown requested by user")
    except ChunkError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == '__main__':
    run()
