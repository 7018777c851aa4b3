"""Exception types raised by the arrangement engine and its backend."""

from __future__ import annotations


class MangoDisplayError(Exception):
    """Base class for all mangodisplay errors."""


class BackendError(MangoDisplayError):
    """The display server could not be queried, configured or saved to."""


class ModeInvariantError(MangoDisplayError):
    """An output does not have exactly one current mode."""
