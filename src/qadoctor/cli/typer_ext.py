# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application factory with alphabetised commands and options."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final, TypeVar

import typer
from click import Argument, Context, Parameter
from typer.core import TyperCommand, TyperGroup

HELP_OPTION_NAMES: Final[tuple[str, ...]] = ("-h", "--help")


def option_sort_key(param: Parameter) -> str:
    """Return the long option name (without dashes) used to order ``param``."""

    names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
    long_name = next((name for name in names if name.startswith("--")), None)
    return (long_name or param.name or "").lstrip("-").lower()


class SortedTyperCommand(TyperCommand):
    """Command whose options are listed alphabetically.

    Positional arguments keep their declared order because Click binds them
    by position; only options are reordered. Both the plain and the Rich help
    renderers read :meth:`get_params`, so sorting here covers both.
    """

    def get_params(self, ctx: Context) -> list[Parameter]:
        params = super().get_params(ctx)
        arguments = [param for param in params if isinstance(param, Argument)]
        options = sorted((param for param in params if not isinstance(param, Argument)), key=option_sort_key)
        return [*arguments, *options]


class SortedTyperGroup(TyperGroup):
    """Group listing subcommands alphabetically."""

    command_class = SortedTyperCommand

    def list_commands(self, ctx: Context) -> list[str]:
        return sorted(super().list_commands(ctx))


CommandCallback = TypeVar("CommandCallback", bound=Callable[..., Any])


class SortedTyper(typer.Typer):
    """Typer application whose commands are :class:`SortedTyperCommand` instances."""

    def __init__(self, *args: Any, cls: type[TyperGroup] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, cls=cls or SortedTyperGroup, **kwargs)

    def command(
        self,
        name: str | None = None,
        *,
        cls: type[TyperCommand] | None = None,
        **kwargs: Any,
    ) -> Callable[[CommandCallback], CommandCallback]:
        return super().command(name, cls=cls or SortedTyperCommand, **kwargs)


def create_typer(**kwargs: Any) -> SortedTyper:
    """Return a :class:`SortedTyper` with the qadoctor CLI defaults.

    Shell completion installers are disabled and ``-h`` is accepted alongside
    ``--help``. Tracebacks are left to Click because every expected failure
    is already reported as a :class:`~qadoctor.errors.DoctorError`.
    Explicit keyword arguments override these defaults.
    """

    settings: dict[str, Any] = {
        "add_completion": False,
        "pretty_exceptions_enable": False,
        "context_settings": {"help_option_names": list(HELP_OPTION_NAMES)},
    }
    settings.update(kwargs)
    return SortedTyper(**settings)


__all__ = ["SortedTyper", "SortedTyperCommand", "SortedTyperGroup", "create_typer", "option_sort_key"]
