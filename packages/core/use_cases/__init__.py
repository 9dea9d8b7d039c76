"""Core use cases - Application service orchestration.

Use cases orchestrate workflows across adapters without containing framework-specific code.
"""

from __future__ import annotations

from packages.core.use_cases.set_flag_expiry import SetFlagExpiryError, SetFlagExpiryUseCase

__all__ = ["SetFlagExpiryError", "SetFlagExpiryUseCase"]
