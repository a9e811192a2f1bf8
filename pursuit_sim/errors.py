"""Exceptions raised for paths the controller cannot follow."""

from typing import Optional


class PathError(ValueError):
    """Base class for invalid path input."""


class DegenerateSegmentError(PathError):
    """Two consecutive waypoints coincide, giving a zero-length segment.

    Attributes:
        index: Index of the offending segment (its first waypoint).
    """

    def __init__(self, index: int, message: Optional[str] = None) -> None:
        self.index = index
        if message is None:
            message = f"Segment {index} has zero length (waypoints {index} and {index + 1} coincide)"
        super().__init__(message)


class EmptyPathError(PathError):
    """A run was started on a path with fewer than two waypoints."""
