from .time import as_utc, to_epoch_ms, utcnow
from .types import JSONType, UUIDType

__all__ = ["JSONType", "UUIDType", "as_utc", "to_epoch_ms", "utcnow"]
