from typing import Optional


class EvaluationError(Exception):
    """Base class for failures inside the resume evaluation pipeline."""

    # Pipeline stage the failure happened in, set by the orchestrator.
    stage: Optional[str] = None


class UnreadableDocument(EvaluationError):
    """The uploaded document could not be turned into text."""


class GatewayError(EvaluationError):
    """The language model call failed (transport, status or empty body)."""


class StructuringError(EvaluationError):
    """The model replied, but not with a usable resume structure."""


class ScoringError(EvaluationError):
    """The model replied, but not with a usable score breakdown."""


class UploadError(EvaluationError):
    """The blob store rejected or failed the write."""
