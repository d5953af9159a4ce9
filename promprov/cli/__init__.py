"""promprov CLI: Typer-based command-line interface.

Provides the ``promprov`` command with subcommands for planning, applying
and rendering a provisioning run, and for inspecting host facts.

All output uses Rich for formatted terminal display.
"""
