"""Diagnostics collector shared by every pipeline stage.

Replaces process-wide error flags: one ``Diagnostics`` instance is created
per run (or per interactive line) and passed explicitly to the scanner,
parser, resolver and interpreter. The driver inspects it once afterwards.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import TextIO

from pydantic import BaseModel, ConfigDict

from .errors import FailRuntimeError
from .tokens import Token, TokenType

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    SYNTAX_ERROR = "syntax_error"
    RESOLUTION_ERROR = "resolution_error"
    RUNTIME_ERROR = "runtime_error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    line: int
    message: str
    where: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity != Severity.WARNING

    def __str__(self) -> str:
        if self.severity == Severity.RUNTIME_ERROR:
            return f"{self.message}\n[line {self.line}]"
        label = "Warning" if self.severity == Severity.WARNING else "Error"
        return f"[line {self.line}] {label}{self.where}: {self.message}"


def _where(token: Token) -> str:
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


class DiagnosticSink(ABC):
    """Destination for diagnostics as they are reported."""

    @abstractmethod
    def report(self, diagnostic: Diagnostic) -> None: ...


class StreamSink(DiagnosticSink):
    """Writes each diagnostic as one text block to a stream (stderr by default)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def report(self, diagnostic: Diagnostic) -> None:
        stream = self._stream or sys.stderr
        print(diagnostic, file=stream)
        stream.flush()


class NullSink(DiagnosticSink):
    """Discards diagnostics; the collector still records them."""

    def report(self, diagnostic: Diagnostic) -> None:
        pass


class Diagnostics:
    """Collects errors and warnings and forwards them to a sink."""

    def __init__(
        self, sink: DiagnosticSink | None = None, echo_warnings: bool = True
    ):
        self._sink = sink or StreamSink()
        self._echo_warnings = echo_warnings
        self.entries: list[Diagnostic] = []

    # ── reporting ────────────────────────────────────────────────

    def syntax_error(self, line: int, message: str, token: Token | None = None):
        where = _where(token) if token is not None else ""
        self._record(
            Diagnostic(
                severity=Severity.SYNTAX_ERROR,
                line=line,
                message=message,
                where=where,
            )
        )

    def resolution_error(self, token: Token, message: str):
        self._record(
            Diagnostic(
                severity=Severity.RESOLUTION_ERROR,
                line=token.line,
                message=message,
                where=_where(token),
            )
        )

    def warning(self, token: Token, message: str):
        self._record(
            Diagnostic(
                severity=Severity.WARNING,
                line=token.line,
                message=message,
                where=_where(token),
            )
        )

    def runtime_error(self, error: FailRuntimeError):
        self._record(
            Diagnostic(
                severity=Severity.RUNTIME_ERROR,
                line=error.token.line,
                message=error.message,
            )
        )

    def _record(self, diagnostic: Diagnostic):
        logger.debug("%s: %s", diagnostic.severity.value, diagnostic)
        self.entries.append(diagnostic)
        if diagnostic.is_error or self._echo_warnings:
            self._sink.report(diagnostic)

    # ── queries ──────────────────────────────────────────────────

    def _of(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == severity]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return self._of(Severity.WARNING)

    @property
    def had_syntax_error(self) -> bool:
        return bool(self._of(Severity.SYNTAX_ERROR))

    @property
    def had_resolution_error(self) -> bool:
        return bool(self._of(Severity.RESOLUTION_ERROR))

    @property
    def had_static_error(self) -> bool:
        return self.had_syntax_error or self.had_resolution_error

    @property
    def had_runtime_error(self) -> bool:
        return bool(self._of(Severity.RUNTIME_ERROR))

    def messages(self, severity: Severity | None = None) -> list[str]:
        entries = self.entries if severity is None else self._of(severity)
        return [d.message for d in entries]

    def clear(self):
        self.entries.clear()
