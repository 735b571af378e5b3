# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing status lines with optional colour and emoji support.

Every helper writes to standard error; standard output is reserved for JSON
payloads and bare values consumed by scripts.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, Literal

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, get_console_manager

StatusKind = Literal["info", "ok", "warn", "fail"]

# (emoji prefix, rich style) per status kind.
STATUS_STYLES: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, else an empty string."""

    return symbol if enable else ""


def _stderr_console(use_color: bool | None, use_emoji: bool) -> tuple[Console, bool]:
    color_enabled = detect_tty(stderr=True) if use_color is None else use_color
    return get_console_manager().get(color=color_enabled, emoji=use_emoji, stderr=True), color_enabled


def status(kind: StatusKind, msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print one status line to stderr.

    Args:
        kind: Which prefix and colour to use.
        msg: Message text. Rich markup is not interpreted, so file paths
            with square brackets print verbatim.
        use_emoji: Prefix the line with the status emoji.
        use_color: Force colour on or off; ``None`` follows stderr's TTY state.
    """

    symbol, style = STATUS_STYLES[kind]
    console, color_enabled = _stderr_console(use_color, use_emoji)
    text = Text(f"{emoji(symbol, use_emoji)}{msg}")
    if color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status("info", msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status("ok", msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status("warn", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status("fail", msg, use_emoji=use_emoji, use_color=use_color)


def indented(lines: Iterable[str], *, bullet: str = "") -> None:
    """Print ``lines`` to stderr beneath the previous status line."""

    console, _ = _stderr_console(False, False)
    for line in lines:
        console.print(Text(f"  {bullet}{line}"))


def section(title: str, *, use_color: bool) -> None:
    """Print a section header: a Rich rule with colour, a dashed title without."""

    console = get_console_manager().get(color=use_color, emoji=True, stderr=True)
    if use_color:
        console.print()
        console.print(Rule(title))
    else:
        console.print(f"\n--- {title} ---")


__all__ = ["STATUS_STYLES", "StatusKind", "emoji", "fail", "indented", "info", "ok", "section", "status", "warn"]
