"""Errors raised by upstream collaborators."""

from typing import Optional


class UpstreamError(Exception):
    """A rejected upstream fetch: HTTP-style status plus message."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(f"{status}: {message}" if status is not None else message)
        self.status = status
        self.message = message
