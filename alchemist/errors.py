from enum import Enum


class StoreUnavailable(Exception):
    """The recipe/user backend could not be read or written."""
    pass


class SynthesisError(Exception):
    """The model call failed or returned content that does not validate."""
    pass


class AttributionFailed(Exception):
    """A discovery counter update failed. Logged, never surfaced."""
    pass


class UsernameTaken(Exception):
    pass


class ResolutionFailure(str, Enum):
    store_unavailable = "store_unavailable"
    synthesis_failed = "synthesis_failed"


class ResolutionError(Exception):
    """A combination could not be resolved; the caller keeps its two inputs."""

    def __init__(self, reason: ResolutionFailure, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)
