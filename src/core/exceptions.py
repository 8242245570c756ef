"""
Error taxonomy for the practice engine.

Storage failures are fatal to the operation in progress and are never
retried by the engine; callers decide whether to retry.
"""

from __future__ import annotations


class PracticeEngineError(Exception):
    """Base class for all practice engine errors."""


class StorageUnavailable(PracticeEngineError):
    """The statistics persistence layer could not be reached or written."""

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        self.detail = detail
        message = f"Statistics storage unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidProfile(PracticeEngineError):
    """The learner profile identifier is unusable."""

    def __init__(self, profile_id: object):
        self.profile_id = profile_id
        super().__init__(f"Invalid learner profile: {profile_id!r}")


class EmptyCandidatePool(PracticeEngineError):
    """The configured variant filter leaves no eligible items for a round."""

    def __init__(self, variant_filter: str | None):
        self.variant_filter = variant_filter
        super().__init__(f"No eligible items for variant filter {variant_filter!r}")
