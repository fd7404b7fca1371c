"""Error kinds raised by the graph, lifecycle and directory services."""
from __future__ import annotations


class GraphError(Exception):
    """Base class for recoverable service errors reported to the caller."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(GraphError):
    kind = "invalid_argument"


class NotFound(GraphError):
    kind = "not_found"


class AlreadyExists(GraphError):
    kind = "already_exists"


class AlreadyRequested(GraphError):
    kind = "already_requested"


class AlreadyFriends(GraphError):
    kind = "already_friends"


class NotFriends(GraphError):
    kind = "not_friends"


class Unauthorized(GraphError):
    kind = "unauthorized"
