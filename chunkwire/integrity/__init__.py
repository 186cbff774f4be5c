from .hasher import ContentHasher, create_hash, verify_hash, DEFAULT_ALGORITHM

__all__ = [
    'ContentHasher',
    'create_hash',
    'verify_hash',
    'DEFAULT_ALGORITHM'
]
