"""Typer sub-commands for the ``certfix`` CLI."""
