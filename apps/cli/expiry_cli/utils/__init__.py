"""Utilities for the flag expiry CLI."""

from apps.cli.expiry_cli.utils.async_wrapper import async_command

__all__ = ["async_command"]
