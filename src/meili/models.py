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
"""Response objects returned by the Meilisearch client.

``DictObject`` is the ``object_pairs_hook`` used when decoding JSON bodies,
so untyped responses (documents, index metadata, search results) allow
attribute access. Tasks and task handles, which the client reasons about,
get typed immutable classes with ``from_dict`` decoders that raise
``DecodeError`` on a malformed payload.

Example:
    >>> info = TaskInfo.from_dict({'taskUid': 3, 'indexUid': 'movies',
    ...                            'status': 'enqueued', 'type': 'indexCreation'})
    >>> info.task_uid, info.status
    (3, <TaskStatus.ENQUEUED: 'enqueued'>)
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError


NA = object()


class DictObject(dict):
    """Dictionary with attribute-style access.

    Maps the instance ``__dict__`` to the dict itself, so ``obj.key`` and
    ``obj['key']`` are the same lookup.

    Example:
        >>> obj = DictObject(uid='movies', primaryKey='id')
        >>> obj.primaryKey
        'id'
    """

    def __init__(self, *args, **kwargs):
        dict.__init__(self, *args, **kwargs)
        self.__dict__ = self


class TaskStatus(enum.Enum):
    """Lifecycle states of a server-side task."""

    ENQUEUED = 'enqueued'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        """``True`` once no further transition can happen."""
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED)


def _require_mapping(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}", data)
    return data


def _status(value: Any, data: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise DecodeError(f"Unknown task status: {value!r}", data) from None


def _task_uid(data: dict, *keys: str) -> int:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"Task identifier {key!r} is not an integer: {value!r}", data)
        return value
    raise DecodeError(f"Missing task identifier (one of {', '.join(keys)})", data)


@dataclass(frozen=True)
class ServiceError:
    """Structured error payload sent by the service.

    Appears both in rejected responses and embedded in failed tasks.
    """

    message: str | None = None
    code: str | None = None
    type: str | None = None
    link: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ServiceError:
        data = _require_mapping(data, 'error')
        return cls(
            message=data.get('message'),
            code=data.get('code'),
            type=data.get('type'),
            link=data.get('link'),
        )


TaskError = ServiceError


@dataclass(frozen=True)
class TaskInfo:
    """Handle returned as soon as a mutating request is accepted.

    Attributes:
        task_uid: Server-assigned task identifier.
        index_uid: Index the task applies to, if any.
        status: Status at enqueue time, normally ``enqueued``.
        type: Kind of operation (``documentAdditionOrUpdate``, ...).
        enqueued_at: Server timestamp, kept as sent.
    """

    task_uid: int
    index_uid: str | None = None
    status: TaskStatus = TaskStatus.ENQUEUED
    type: str | None = None
    enqueued_at: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TaskInfo:
        data = _require_mapping(data, 'task handle')
        status = data.get('status')
        return cls(
            task_uid=_task_uid(data, 'taskUid', 'uid', 'updateId'),
            index_uid=data.get('indexUid'),
            status=TaskStatus.ENQUEUED if status is None else _status(status, data),
            type=data.get('type'),
            enqueued_at=data.get('enqueuedAt'),
        )


@dataclass(frozen=True)
class Task:
    """Server-side record of one asynchronous operation.

    ``error`` is only set when ``status`` is ``failed``.
    """

    uid: int
    status: TaskStatus
    index_uid: str | None = None
    type: str | None = None
    details: DictObject | None = None
    error: TaskError | None = None
    duration: str | None = None
    enqueued_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    raw: DictObject = field(default_factory=DictObject, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        data = _require_mapping(data, 'task')
        if 'status' not in data:
            raise DecodeError("Missing task status", data)
        error = data.get('error')
        return cls(
            uid=_task_uid(data, 'uid', 'taskUid', 'updateId'),
            status=_status(data['status'], data),
            index_uid=data.get('indexUid'),
            type=data.get('type'),
            details=data.get('details'),
            error=ServiceError.from_dict(error) if error else None,
            duration=data.get('duration'),
            enqueued_at=data.get('enqueuedAt'),
            started_at=data.get('startedAt'),
            finished_at=data.get('finishedAt'),
            raw=data if isinstance(data, DictObject) else DictObject(data),
        )


def task_list(data: Any) -> list[Task]:
    """Decode a ``GET /tasks`` body (``{"results": [...]}``) into tasks."""
    data = _require_mapping(data, 'task list')
    results = data.get('results')
    if not isinstance(results, list):
        raise DecodeError("Missing task results", data)
    return [Task.from_dict(item) for item in results]
