# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Error taxonomy for topoactions.

Store backends raise NotFoundError / StoreUnavailableError; the codec raises
DecodeError; operations raise ConfigurationError before starting any work.
The action manager uses this taxonomy to decide whether a failure is skipped
(vanished or malformed node) or counted against a path.
"""


class TopoActionsError(Exception):
    """Base class for all topoactions errors."""

    ...


class NotFoundError(TopoActionsError):
    """
    The node does not exist (or vanished between listing and fetching).
    Tolerated everywhere: logged and excluded, never fatal.
    """

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(message or f"node not found: {path}")
        self.path = path


class DecodeError(TopoActionsError):
    """An action payload is malformed; the node is logged and excluded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot decode action node {path or '<unknown>'}: {reason}")
        self.path = path
        self.reason = reason


class StoreUnavailableError(TopoActionsError):
    """
    Backend or network failure. Counted as one path-level failure; all other
    paths of the batch are still processed.
    """

    ...


class ConfigurationError(TopoActionsError):
    """Invalid invocation or missing backend capability; raised before any worker starts."""

    ...
