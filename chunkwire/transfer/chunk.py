"""Chunk record exchanged over the transport"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from ..errors import InvalidInput


@dataclass(frozen=True)
class Chunk:
    """One fragment of a transfer"""
    id: str  # content address of the whole payload
    total: int
    index: int
    data: Union[str, bytes]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-able form; raw byte fragments become integer lists"""
        data = self.data
        if isinstance(data, (bytes, bytearray)):
            data = list(data)

        return {
            'id': self.id,
            'total': self.total,
            'index': self.index,
            'data': data
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Chunk':
        if not isinstance(raw, dict):
            raise InvalidInput(f"Chunk must be a mapping, got {type(raw).__name__}")

        try:
            data = raw['data']
            if isinstance(data, list):
                data = bytes(data)
            return cls(id=raw['id'], total=raw['total'], index=raw['index'], data=data)
        except KeyError as e:
            raise InvalidInput(f"Chunk is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Invalid chunk data: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_json(cls, text: str) -> 'Chunk':
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Invalid chunk JSON: {e}") from e
        return cls.from_dict(raw)
