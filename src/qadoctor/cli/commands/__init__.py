# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI command registry."""

from __future__ import annotations

from ..typer_ext import SortedTyper
from . import detect, parallelism, parse, run, skipped, verify

__all__ = ["register_commands"]


def register_commands(app: SortedTyper) -> None:
    """Register every built-in command on ``app``."""

    detect.register(app)
    run.register(app)
    parse.register(app)
    verify.register(app)
    parallelism.register(app)
    skipped.register(app)
