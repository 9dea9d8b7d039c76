"""Ports for core use-cases."""

from __future__ import annotations

from packages.core.ports.flag_store import FlagPage, FlagStorePort

__all__ = ["FlagPage", "FlagStorePort"]
