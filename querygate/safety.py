from __future__ import annotations

import re
import time
from typing import Pattern

from querygate.errors import ErrorCode, ValidationError
from querygate.metrics import safety_blocks_total, safety_checks_total
from querygate.types import StageResult, StageTrace


# Keyword-level checks only. String literals and comments are NOT masked, so a
# forbidden word or a ';' inside a quoted label is rejected too.

_READ_HEAD_RE: Pattern[str] = re.compile(r"^\s*(select|with)\b", re.IGNORECASE)

FORBIDDEN_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "alter",
    "drop",
    "create",
    "truncate",
    "grant",
    "revoke",
    "vacuum",
    "analyze",
    "reindex",
)

_FORBIDDEN: Pattern[str] = re.compile(
    r"\b(" + "|".join(FORBIDDEN_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

# (reason, error code, message) per rejection kind
_REJECTIONS = {
    "multiple_statements": (
        ErrorCode.SAFETY_MULTI_STATEMENT,
        "Only a single SELECT statement is allowed (multiple statements).",
    ),
    "not_select": (
        ErrorCode.SAFETY_NON_SELECT,
        "Only SELECT queries are allowed (not a SELECT).",
    ),
    "forbidden_keyword": (
        ErrorCode.SAFETY_FORBIDDEN_KEYWORD,
        "Query contains forbidden keywords. Read-only SELECTs only.",
    ),
}


def _ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)


def strip_trailing_separator(sql: str) -> str:
    """Trim, then drop at most one trailing ';'."""
    body = (sql or "").strip()
    if body.endswith(";"):
        body = body[:-1]
    return body


class Safety:
    """
    Read-only gate: one statement, starts with SELECT/WITH, no write/DDL verbs.

    Checks run in that order and the first violation wins.
    """

    name = "safety"

    def _blocked(self, reason: str, t0: float, token: str | None = None) -> StageResult:
        code, message = _REJECTIONS[reason]
        safety_blocks_total.labels(reason=reason).inc()
        safety_checks_total.labels(ok="false").inc()
        notes = {"reason": reason}
        if token:
            notes["keyword"] = token
            message = f"{message} Forbidden: {token}"
        return StageResult(
            ok=False,
            error=[message],
            error_code=code,
            trace=StageTrace(stage=self.name, duration_ms=_ms(t0), notes=notes),
        )

    def check(self, sql: str) -> StageResult:
        t0 = time.perf_counter()
        body = strip_trailing_separator(sql)

        # 1) single statement: any remaining separator means a second statement
        if ";" in body:
            return self._blocked("multiple_statements", t0)

        # 2) read-only head
        if not _READ_HEAD_RE.match(body):
            return self._blocked("not_select", t0)

        # 3) forbidden verbs anywhere, subqueries included
        m = _FORBIDDEN.search(body)
        if m:
            return self._blocked("forbidden_keyword", t0, token=m.group(0).lower())

        safety_checks_total.labels(ok="true").inc()
        return StageResult(
            ok=True,
            data={"sql": body, "original_len": len(sql), "sanitized_len": len(body)},
            trace=StageTrace(stage=self.name, duration_ms=_ms(t0)),
        )

    def validate(self, sql: str) -> str:
        """Return the validated SQL or raise ``ValidationError``."""
        res = self.check(sql)
        if res.ok:
            return res.data["sql"]
        notes = res.trace.notes if res.trace and res.trace.notes else {}
        raise ValidationError(
            message=(res.error or ["invalid SQL"])[0],
            code=res.error_code or ErrorCode.SAFETY_NON_SELECT,
            reason=notes.get("reason", "not_select"),
            details=list(res.error or []),
            extra=dict(notes),
        )
