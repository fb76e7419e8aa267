"""Exception types raised by the AuditLens pipeline."""


class AuditLensError(Exception):
    """Base exception for all AuditLens errors."""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        return self.message


class MaterializationError(AuditLensError):
    """Repository could not be fetched, parsed, or yielded no usable files.

    ``stage`` names the step that failed: reference, metadata, tree or
    selection.
    """


class AnalysisError(AuditLensError):
    """The completion API call failed (bad status, transport error)."""
