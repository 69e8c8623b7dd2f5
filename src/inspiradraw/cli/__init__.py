"""Command line extensions for the `litestar` CLI."""

from inspiradraw.cli.commands import InspiraCLIPlugin

__all__ = ["InspiraCLIPlugin"]
