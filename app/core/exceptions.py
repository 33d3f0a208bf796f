"""Progression engine error kinds."""


class ProgressionError(Exception):
    """Base for errors raised by the progression engine."""


class NotFoundError(ProgressionError):
    """An exercise, variable or session id does not resolve."""

    def __init__(self, kind: str, identifier: object):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class ConfigurationError(ProgressionError):
    """Exercise or variable configuration the engine cannot progress."""


class PersistenceError(ProgressionError):
    """An underlying store call failed."""
