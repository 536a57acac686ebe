"""
Virtual-document identifiers for log streams.

A log stream document is named by ``awsCloudWatchLogs:<group>:<stream>?<region>``.
The path (``<group>:<stream>``) is the registry key: two identifiers refer
to the same document iff their paths are equal.
"""

from dataclasses import dataclass
from typing import Union

from .errors import InvalidLogStreamUri

SCHEME = "awsCloudWatchLogs"


@dataclass(frozen=True)
class LogStreamUri:
    """Identity of one log stream document."""

    log_group_name: str
    log_stream_name: str
    region: str = ""

    @property
    def path(self) -> str:
        """The comparison key of this document."""
        return f"{self.log_group_name}:{self.log_stream_name}"

    def __str__(self) -> str:
        text = f"{SCHEME}:{self.path}"
        if self.region:
            text += f"?{self.region}"
        return text


def parse_uri(text: str) -> LogStreamUri:
    """Parse ``awsCloudWatchLogs:<group>:<stream>[?<region>]``."""
    scheme, sep, rest = text.partition(":")
    if not sep or scheme != SCHEME:
        raise InvalidLogStreamUri(f"Not a {SCHEME} URI: {text!r}")

    path, _, region = rest.partition("?")
    # Log group names never contain ':'
    group, sep, stream = path.partition(":")
    if not sep or not group or not stream:
        raise InvalidLogStreamUri(f"URI path must be <group>:<stream>: {text!r}")

    return LogStreamUri(log_group_name=group, log_stream_name=stream, region=region)


def to_key(identifier: Union[LogStreamUri, str]) -> str:
    """Return the registry key for a URI, a URI string, or a bare key."""
    if isinstance(identifier, LogStreamUri):
        return identifier.path
    text = str(identifier)
    if text.startswith(SCHEME + ":"):
        return text[len(SCHEME) + 1 :].partition("?")[0]
    return text


def as_uri(identifier: Union[LogStreamUri, str]) -> LogStreamUri:
    """Return ``identifier`` as a LogStreamUri; bare keys are read as ``<group>:<stream>``."""
    if isinstance(identifier, LogStreamUri):
        return identifier
    text = str(identifier)
    if text.startswith(SCHEME + ":"):
        return parse_uri(text)
    return parse_uri(f"{SCHEME}:{text}")
