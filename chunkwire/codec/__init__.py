from .compression import (
    compress, decompress, compress_async, decompress_async, is_gzip, MINIMUM_SIZE
)
from .splitter import (
    Splitter, RawSplitter, Base64Splitter, get_splitter, split_text, join_text,
    SPLITTERS, DEFAULT_ENCODING
)

__all__ = [
    'compress',
    'decompress',
    'compress_async',
    'decompress_async',
    'is_gzip',
    'MINIMUM_SIZE',
    'Splitter',
    'RawSplitter',
    'Base64Splitter',
    'get_splitter',
    'split_text',
    'join_text',
    'SPLITTERS',
    'DEFAULT_ENCODING'
]
