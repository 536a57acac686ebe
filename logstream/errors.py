"""Exceptions raised by logstream."""


class LogStreamError(Exception):
    """Base class for logstream errors."""


class LogFetchError(LogStreamError):
    """A log source failed to fetch a page."""


class InvalidLogStreamUri(LogStreamError, ValueError):
    """A string could not be parsed as a log stream URI."""
