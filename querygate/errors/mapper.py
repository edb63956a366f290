from querygate.errors.codes import ErrorCode

ERROR_MAP = {
    ErrorCode.SAFETY_NON_SELECT: (422, False),
    ErrorCode.SAFETY_MULTI_STATEMENT: (422, False),
    ErrorCode.SAFETY_FORBIDDEN_KEYWORD: (422, False),
    ErrorCode.POOL_EXHAUSTED: (503, True),
    ErrorCode.DB_EXECUTION_ERROR: (422, False),
    ErrorCode.DB_TIMEOUT: (503, True),
    ErrorCode.DB_UNREACHABLE: (503, True),
    ErrorCode.CONFIG_MISSING: (500, False),
}


def map_error(code: ErrorCode | None) -> tuple[int, bool]:
    if code is None:
        return (500, False)
    return ERROR_MAP.get(code, (500, False))
