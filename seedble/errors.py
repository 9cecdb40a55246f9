"""Error taxonomy for the Seedble core."""


class SeedbleError(Exception):
    """Base class for all Seedble errors."""


class ValidationError(SeedbleError, ValueError):
    """Malformed or empty input, or an illegal lifecycle transition."""


class NotFoundError(SeedbleError, LookupError):
    """A referenced user, skill, project or review does not exist."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} '{key}' not found")
        self.kind = kind
        self.key = key


class PersistenceError(SeedbleError):
    """The data store could not be read or written."""


class NarrativeUnavailableError(SeedbleError):
    """The AI collaborator could not produce usable output."""
