# -*- coding: utf-8 -*-
#
# Copyright (C) 2015-2026 Dubalu LLC. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.
#
"""Exceptions raised by the Meilisearch client.

Every error derives from ``MeilisearchError`` so callers can catch the
whole family at once, while the subclasses keep transport failures,
rejected responses, undecodable bodies, poller timeouts and local
validation problems apart.
"""
from __future__ import annotations

from typing import Any


class MeilisearchError(Exception):
    """Base class for all errors raised by this library."""


class CommunicationError(MeilisearchError):
    """The request never reached the server or no response came back.

    Raised for connection failures, transport-level timeouts and protocol
    errors. The underlying ``httpx`` exception is chained as ``__cause__``.
    """


class ApiError(MeilisearchError):
    """The server answered with a status code that was not accepted.

    Attributes:
        status_code: HTTP status returned by the server.
        body: Raw response body.
        message: Service error message, if the body could be decoded.
        code: Service error code (e.g. ``index_not_found``).
        type: Service error type (e.g. ``invalid_request``).
        link: Documentation link for the error code.
    """

    def __init__(self, status_code: int, body: bytes = b'',
            message: str | None = None, code: str | None = None,
            type: str | None = None, link: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.message = message
        self.code = code
        self.type = type
        self.link = link
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message is not None:
            return f"{self.status_code} {self.code}: {self.message}"
        body = self.body.decode('utf-8', 'replace') if isinstance(self.body, bytes) else self.body
        return f"{self.status_code}: {body}" if body else str(self.status_code)


class NotFoundError(ApiError):
    """Raised when the requested resource does not exist (HTTP 404)."""


class DecodeError(MeilisearchError):
    """An accepted response whose body is not the expected shape."""

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.body = body


class TaskTimeoutError(MeilisearchError):
    """The wait for a task ended before it reached a terminal status.

    Raised when the deadline elapses or the wait context is cancelled. This
    is not a task failure: the task may still complete on the server.
    """

    def __init__(self, task_uid: int, message: str | None = None) -> None:
        self.task_uid = task_uid
        super().__init__(message or f"Timed out waiting for task {task_uid}")


class ValidationError(MeilisearchError, ValueError):
    """A local precondition failed before any request was made."""


class BatchSubmitError(MeilisearchError):
    """One chunk of a batched write could not be submitted.

    Chunks before ``chunk_index`` were accepted by the server and are listed
    in ``submitted``; chunks after it were never sent.
    """

    def __init__(self, chunk_index: int, submitted: list) -> None:
        self.chunk_index = chunk_index
        self.submitted = submitted
        super().__init__(
            f"Submitting chunk {chunk_index} failed after {len(submitted)} accepted chunk(s)"
        )
