"""Flag expiry application shells.

This package contains thin I/O layers over packages/:
- cli: Typer CLI (also the entry point used by CI workflows)
"""
