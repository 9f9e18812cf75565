from __future__ import annotations

from ._store import DEFAULT_SCREEN, MAX_PAYLOADS, PayloadStore
from .types import (
    InvalidRequestError,
    RayMeta,
    RayOrigin,
    RayPayload,
    RayRequest,
    StoredPayload,
)

__all__ = [
    "DEFAULT_SCREEN",
    "InvalidRequestError",
    "MAX_PAYLOADS",
    "PayloadStore",
    "RayMeta",
    "RayOrigin",
    "RayPayload",
    "RayRequest",
    "StoredPayload",
]
