"""
Error taxonomy for the personalization engine.

ValidationError and NotFoundError surface to the caller immediately.
StorageError wraps backend failures (raise ... from e). PartialFailure is
raised only on request, from WeightUpdateResult.raise_for_failures().
"""


class PersonalizationError(Exception):
    """Base class for all engine errors."""


class ValidationError(PersonalizationError):
    """A required decision field is missing or invalid."""


class NotFoundError(PersonalizationError):
    """A referenced article or analysis does not exist."""


class StorageError(PersonalizationError):
    """The weight, decision, or ignore-reason store is unreachable or rejected a write."""


class PartialFailure(PersonalizationError):
    """Some weight adjustments failed while the decision itself was recorded."""

    def __init__(self, result):
        self.result = result
        failed = ", ".join(f.feature_key for f in result.failures)
        super().__init__(
            f"{len(result.failures)} of {len(result.failures) + len(result.updates)} "
            f"weight adjustments failed: {failed}"
        )
