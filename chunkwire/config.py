"""Chunking configuration"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from .codec.splitter import DEFAULT_ENCODING, get_splitter
from .errors import InvalidParameter

logger = logging.getLogger(__name__)


@dataclass
class ChunkConfig:
    """Sender and receiver settings"""
    chunk_size: int = 16 * 1024  # bytes per chunk
    compress: bool = True
    timeout: Optional[float] = 60.0  # seconds, None disables abandonment
    encoding: str = DEFAULT_ENCODING
    verify: bool = False

    def validate(self) -> 'ChunkConfig':
        """Check every field, raise InvalidParameter on the first bad one"""
        get_splitter(self.encoding).validate_chunk_size(self.chunk_size)

        if not isinstance(self.compress, bool):
            raise InvalidParameter(f"compress must be a boolean, got {self.compress!r}")
        if not isinstance(self.verify, bool):
            raise InvalidParameter(f"verify must be a boolean, got {self.verify!r}")

        if self.timeout is not None:
            if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
                raise InvalidParameter(f"timeout must be a number, got {self.timeout!r}")
            if self.timeout <= 0:
                raise InvalidParameter(f"timeout must be positive, got {self.timeout!r}")

        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ChunkConfig':
        known = {f.name for f in fields(cls)}
        for key in raw:
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")

        return cls(**{k: v for k, v in raw.items() if k in known}).validate()


def load_config(path: Union[str, Path, None] = None,
                **overrides) -> ChunkConfig:
    """
    Load settings from a YAML file
    Missing file means defaults; keyword overrides that are not None win
    """
    raw: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if path.exists():
            try:
                with open(path, 'r') as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidParameter(f"Malformed config file {path}: {e}") from e

            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise InvalidParameter(f"Config file {path} must contain a mapping")

            raw.update(loaded)
            logger.info(f"Loaded config from {path}")
        else:
            logger.debug(f"No config file at {path}, using defaults")

    raw.update({k: v for k, v in overrides.items() if v is not None})
    return ChunkConfig.from_dict(raw)
