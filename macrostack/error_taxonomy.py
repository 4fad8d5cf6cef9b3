"""Structured error taxonomy for macrostack.

Transport failures are the HTTP library's own ``httpx.TransportError``
family; they are retried by :func:`macrostack._http.fetch_with_retry`
and re-raised once attempts are exhausted.  The classes below cover the
two failure modes that originate in this package.
"""
from __future__ import annotations


class MacroStackError(Exception):
    """Base error for all macrostack subsystems."""
    pass


class PayloadError(MacroStackError):
    """Provider answered, but with an error status or an unusable body.

    Soft failure: adapters react by moving to their next fallback tier
    (or omitting a single market symbol).
    """

    def __init__(self, message: str, *, source: str = ""):
        self.source = source
        super().__init__(message)


class SnapshotWriteError(MacroStackError):
    """The assembled snapshot could not be persisted.  Fatal to the run."""

    def __init__(self, message: str, *, path: str = ""):
        self.path = path
        super().__init__(message)
