"""Diagnostics on stderr.

gptwire never prints response data; what it does print (cache hits and
misses, retries, warnings) goes to stderr through a Rich console so that it
cannot mix with an application's own stdout.

Library code fetches the shared manager with :func:`get_output`; an
application configures it once with :func:`set_output`.  Without that, a
default manager is created on first use, verbose if ``GPTWIRE_VERBOSE`` is
set.  ``NO_COLOR`` and ``TERM=dumb`` turn Rich styling off.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape


class OutputManager:
    """Level-filtered writer for diagnostic messages.

    ========= ========================= ===================
    level     prefix                    shown when
    ========= ========================= ===================
    debug     ``[debug]``               ``verbose``
    info      none                      not ``quiet``
    success   none (green)              not ``quiet``
    warning   ``Warning:``              always
    error     ``Error:``                always
    ========= ========================= ===================
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._console = Console(file=sys.stderr, no_color=self._plain, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit(message, prefix="[debug]", style="dim")

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        self._emit(message, prefix="Warning:", prefix_style="yellow")

    def error(self, message: str) -> None:
        self._emit(message, prefix="Error:", prefix_style="bold red")

    def _emit(
        self,
        message: str,
        prefix: str = "",
        style: str = "",
        prefix_style: str = "",
    ) -> None:
        if self._plain:
            line = f"{prefix} {message}" if prefix else message
            print(line, file=sys.stderr, flush=True)
            return

        markup = escape(message)
        if prefix:
            head = escape(prefix)
            if prefix_style:
                head = f"[{prefix_style}]{head}[/{prefix_style}]"
            markup = f"{head} {markup}"
        if style:
            markup = f"[{style}]{markup}[/{style}]"
        self._console.print(markup)


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# --- Shared instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager(verbose=bool(os.environ.get("GPTWIRE_VERBOSE")))
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the shared manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
