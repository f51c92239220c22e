"""Exceptions raised by the check runner and the registry loader."""

from __future__ import annotations


class TrafficLightError(Exception):
    pass


class EntityNotFoundError(TrafficLightError):
    """A component or owning-group reference does not resolve in the catalog."""

    def __init__(self, ref: str, message: str | None = None) -> None:
        self.ref = ref
        super().__init__(message or f"Entity not found: {ref}")


class InvalidConfigurationError(TrafficLightError):
    """A component has no owning group, or a check definition is malformed."""


class GroupNotFoundError(EntityNotFoundError):
    """A component names an owning group that does not resolve in the catalog."""
