"""
assume_shims/reporter.py
════════════════════════

Terminal rendering of assumption results and errors, coloured with
``termcolor``::

    error[assumption-violated]: assumption was not upheld
      --> argument 0 (value) of stringprefix(value, prefix)

    ok: (unknown string (prefix "foo-"))
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from termcolor import colored

from assume_shims.errors import AssumptionError
from assume_shims.literal import format_type, format_value
from assume_shims.provider import AssumptionFunction, Provider
from assume_shims.values import Value


class Reporter:
    """Write results to *out* and errors to *err*."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        color: bool = False,
    ) -> None:
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self._color = color

    def _paint(self, text: str, color: Optional[str] = None, attrs: Optional[List[str]] = None) -> str:
        if not self._color:
            return text
        return colored(text, color, attrs=attrs, force_color=True)

    # ── results ──────────────────────────────────────────────────────

    def result(self, value: Value) -> None:
        label = self._paint("ok", "green", attrs=["bold"])
        self._out.write(f"{label}: {format_value(value)}\n")

    def error(self, exc: AssumptionError, fn: Optional[AssumptionFunction] = None) -> None:
        header = self._paint(f"error[{exc.code}]", "red", attrs=["bold"])
        lines = [f"{header}: {self._paint(exc.message, attrs=['bold'])}"]
        if fn is not None and 0 <= exc.position < len(fn.params):
            arrow = self._paint("-->", "blue", attrs=["bold"])
            param = fn.params[exc.position].name
            lines.append(f"  {arrow} argument {exc.position} ({param}) of {fn.signature()}")
        self._err.write("\n".join(lines) + "\n")

    def problem(self, message: str) -> None:
        label = self._paint("error", "red", attrs=["bold"])
        self._err.write(f"{label}: {message}\n")

    # ── listings ─────────────────────────────────────────────────────

    def functions(self, provider: Provider) -> None:
        for fn in provider:
            self._out.write(f"{self._paint(fn.signature(), 'cyan', attrs=['bold'])}\n")
            self._out.write(f"    {fn.description}\n")
            for p in fn.params:
                flags = []
                if p.allow_null:
                    flags.append("nullable")
                if p.allow_unknown:
                    flags.append("unknown ok")
                suffix = f" [{', '.join(flags)}]" if flags else ""
                name = self._paint(p.name, attrs=["dark"])
                self._out.write(f"    {name}: {format_type(p.type)}{suffix}  {p.description}\n")
