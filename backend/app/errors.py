"""Error taxonomy for the idea validation pipeline."""

from __future__ import annotations

from typing import Any, Optional


class IdeaValidatorError(Exception):
    """Base class for all pipeline errors."""


class InvalidInput(IdeaValidatorError):
    """The idea text is missing or blank. Raised before any side effect."""


class CompletionFailure(IdeaValidatorError):
    """The completion endpoint errored, timed out, or returned nothing usable."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class SchemaViolation(IdeaValidatorError):
    """A stage response did not parse as JSON or broke the schema contract."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class PersistenceFailure(IdeaValidatorError):
    """The record store could not create or update a record."""


class StageAborted(IdeaValidatorError):
    """A stage configured as fatal failed; carries the partial outcome."""

    def __init__(self, stage: str, outcome: Any, cause: Optional[Exception] = None):
        self.stage = stage
        self.outcome = outcome
        self.cause = cause
        super().__init__(f"Stage '{stage}' failed: {cause}")
