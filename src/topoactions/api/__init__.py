# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Public error types for store backends and callers.
"""

from .errors import (
    ConfigurationError,
    DecodeError,
    NotFoundError,
    StoreUnavailableError,
    TopoActionsError,
)

__all__ = [
    "TopoActionsError",
    "NotFoundError",
    "DecodeError",
    "StoreUnavailableError",
    "ConfigurationError",
]
