"""
Exceptions for the serverless entry point.
"""


class EventParseError(Exception):
    """Raised when an API Gateway event cannot be parsed."""


class RouteNotFoundError(Exception):
    """Raised when no handler matches the event's method and path."""
