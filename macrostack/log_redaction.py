"""Secret redaction for log output.

Provides:
  - ``redact_secrets(msg)``          – strip credentials from a string
  - ``LogRedactionFilter``           – ``logging.Filter`` that auto-redacts
  - ``apply_global_log_redaction()`` – attach the filter to the root logger

FRED and FMP keys travel as query parameters, so any logged URL or
exception text may carry one.
"""
from __future__ import annotations

import logging
import re

# ---------------------------------------------------------------------------
# Sensitive patterns (name, compiled regex)
# ---------------------------------------------------------------------------
_SENSITIVE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    # Query-string credentials: ?api_key=…&apikey=…&token=…
    (
        "query_key",
        re.compile(r"((?:api[_-]?key|apikey|token)=)[^&\s'\"]+", re.IGNORECASE),
    ),
    # Authorization / Bearer headers
    (
        "auth_header",
        re.compile(r"((?:Authorization|Bearer)\s*[:=]?\s*)\S+", re.IGNORECASE),
    ),
    # FRED and FMP keys are 32-char alphanumerics
    ("bare_key", re.compile(r"()\b[a-zA-Z0-9]{32}\b")),
]

_REPLACEMENT = "***REDACTED***"


def redact_secrets(msg: str, replacement: str = _REPLACEMENT) -> str:
    """Return *msg* with all recognised secret patterns replaced.

    The parameter name in ``key=value`` pairs is kept so the log line
    still says which credential was involved.
    """
    if not msg:
        return msg
    result = msg
    for _name, pattern in _SENSITIVE_PATTERNS:
        result = pattern.sub(lambda m: m.group(1) + replacement, result)
    return result


class LogRedactionFilter(logging.Filter):
    """Logging filter that automatically redacts sensitive data.

    Attach to a handler (not a logger) for best results::

        handler.addFilter(LogRedactionFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if record.msg and isinstance(record.msg, str):
            record.msg = redact_secrets(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                redact_secrets(v) if isinstance(v, str) else v
                for v in record.args
            )
        return True


def apply_global_log_redaction() -> None:
    """Attach :class:`LogRedactionFilter` to every handler of the root logger."""
    filt = LogRedactionFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(filt)
