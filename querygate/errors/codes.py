from enum import Enum


class ErrorCode(str, Enum):
    # --- Safety ---
    SAFETY_NON_SELECT = "SAFETY_NON_SELECT"
    SAFETY_MULTI_STATEMENT = "SAFETY_MULTI_STATEMENT"
    SAFETY_FORBIDDEN_KEYWORD = "SAFETY_FORBIDDEN_KEYWORD"

    # --- Pool ---
    POOL_EXHAUSTED = "POOL_EXHAUSTED"

    # --- Executor / DB ---
    DB_EXECUTION_ERROR = "DB_EXECUTION_ERROR"
    DB_TIMEOUT = "DB_TIMEOUT"
    DB_UNREACHABLE = "DB_UNREACHABLE"

    # --- Config ---
    CONFIG_MISSING = "CONFIG_MISSING"
