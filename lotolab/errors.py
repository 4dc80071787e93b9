from __future__ import annotations


class ValidationError(ValueError):
    """Request rejected before any computation (bad dates, bounds, numbers)."""


class OperationCancelled(RuntimeError):
    """The caller's cancellation event was set while a hot loop was running."""


class DrawSourceError(RuntimeError):
    """The historical draw snapshot could not be read."""
