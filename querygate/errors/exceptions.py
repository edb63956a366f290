from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from querygate.errors.codes import ErrorCode


@dataclass
class GatewayError(Exception):
    """Base class for every failure surfaced by the gateway and the catalog."""

    message: str
    code: ErrorCode = ErrorCode.DB_EXECUTION_ERROR
    retryable: bool = False
    details: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationError(GatewayError):
    """Candidate SQL failed a static safety check. Never reaches the store."""

    code: ErrorCode = ErrorCode.SAFETY_NON_SELECT
    reason: str = "not_select"


@dataclass
class ResourceExhaustionError(GatewayError):
    """No pooled connection became available within the acquisition timeout."""

    code: ErrorCode = ErrorCode.POOL_EXHAUSTED
    retryable: bool = True


@dataclass
class ExecutionError(GatewayError):
    """The data store rejected or timed out the wrapped query."""

    code: ErrorCode = ErrorCode.DB_EXECUTION_ERROR
    error_type: Optional[str] = None
    sqlstate: Optional[str] = None


@dataclass
class DataStoreConnectionError(GatewayError):
    """Schema introspection could not reach the data store."""

    code: ErrorCode = ErrorCode.DB_UNREACHABLE
    retryable: bool = True


@dataclass
class ConfigurationError(GatewayError):
    code: ErrorCode = ErrorCode.CONFIG_MISSING
