from querygate.errors.codes import ErrorCode
from querygate.errors.exceptions import (
    ConfigurationError,
    DataStoreConnectionError,
    ExecutionError,
    GatewayError,
    ResourceExhaustionError,
    ValidationError,
)
from querygate.errors.mapper import map_error

__all__ = [
    "ErrorCode",
    "GatewayError",
    "ValidationError",
    "ResourceExhaustionError",
    "ExecutionError",
    "DataStoreConnectionError",
    "ConfigurationError",
    "map_error",
]
