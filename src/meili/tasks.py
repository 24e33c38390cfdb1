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
"""Waiting for asynchronous tasks to finish.

Every mutating call returns a ``TaskInfo`` right away; the server applies
the change later. ``TaskPoller`` queries the task until it leaves the
``enqueued``/``processing`` states, sleeping ``interval`` seconds between
queries, and gives up with ``TaskTimeoutError`` when its ``WaitContext``
is cancelled or its deadline passes.

Example:
    >>> task = await client.index('movies').add_documents(docs)
    >>> task = await client.wait_for_task(task, WaitParams(timeout=30, interval=0.5))
    >>> task.status
    <TaskStatus.SUCCEEDED: 'succeeded'>
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from .errors import TaskTimeoutError, ValidationError
from .models import Task, TaskInfo

logger = logging.getLogger('meili')

DEFAULT_WAIT_TIMEOUT = 5.0
DEFAULT_POLL_INTERVAL = 0.05


class WaitContext:
    """Cancellation signal with an optional deadline.

    A context is owned by one wait. It can be cancelled from any coroutine
    on the same event loop; a poller sleeping on it wakes up immediately.

    Args:
        timeout: Seconds from now until the deadline. ``None`` means no
            deadline; only ``cancel()`` ends the wait.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.deadline = None if timeout is None else time.monotonic() + timeout
        self._cancelled = asyncio.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def done(self) -> bool:
        """``True`` if cancelled or past the deadline."""
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    async def sleep(self, interval: float) -> None:
        """Sleep for ``interval`` seconds unless the context ends first.

        Never returns before ``interval`` has fully elapsed while the
        context is still live.
        """
        end = time.monotonic() + interval
        while not self.done():
            timeout = end - time.monotonic()
            if timeout <= 0:
                return
            remaining = self.remaining()
            if remaining is not None:
                timeout = min(timeout, remaining)
            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout)
            except asyncio.TimeoutError:
                pass


@dataclass(frozen=True)
class WaitParams:
    """How long and how often to poll a task.

    Attributes:
        timeout: Seconds before giving up. Ignored when ``context`` is set.
        interval: Seconds between two status queries, greater than zero.
        context: Caller-owned ``WaitContext``, for waits the caller wants to
            cancel explicitly.
    """

    timeout: float | None = DEFAULT_WAIT_TIMEOUT
    interval: float = DEFAULT_POLL_INTERVAL
    context: WaitContext | None = None

    def __post_init__(self) -> None:
        if isinstance(self.interval, bool) or not isinstance(self.interval, (int, float)):
            raise ValidationError(f"Poll interval must be a number, got {self.interval!r}")
        if self.interval <= 0:
            raise ValidationError(f"Poll interval must be greater than zero, got {self.interval}")

    def start(self) -> WaitContext:
        if self.context is not None:
            return self.context
        return WaitContext(self.timeout)


TaskRef: TypeAlias = TaskInfo | Task | int


def task_uid_of(task: TaskRef) -> int:
    if isinstance(task, TaskInfo):
        return task.task_uid
    if isinstance(task, Task):
        return task.uid
    return int(task)


class TaskPoller:
    """Polls a task until it reaches a terminal status.

    Args:
        fetch: Coroutine function returning the current ``Task`` for a uid,
            normally ``Meilisearch.get_task``.
        default_wait: Wait policy used when a call does not pass its own.
    """

    def __init__(self, fetch: Callable[[int], Awaitable[Task]],
            default_wait: WaitParams | None = None) -> None:
        self.fetch = fetch
        self.default_wait = default_wait if default_wait is not None else WaitParams()

    async def wait(self, task: TaskRef, wait_params: WaitParams | None = None) -> Task:
        """Block until the task is ``succeeded`` or ``failed``.

        A ``failed`` task is returned, not raised; check ``task.status``.
        A terminal task fetched just as the deadline passes is still
        returned.

        Args:
            task: ``TaskInfo``, ``Task`` or task uid.
            wait_params: Overrides ``default_wait`` for this call.

        Returns:
            Task: The task in its terminal state, including ``error`` when
                it failed.

        Raises:
            TaskTimeoutError: If the context is cancelled or the deadline
                passes before a terminal status is observed.
        """
        uid = task_uid_of(task)
        params = wait_params if wait_params is not None else self.default_wait
        context = params.start()
        while True:
            if context.done():
                reason = 'cancelled' if context.cancelled else 'deadline exceeded'
                raise TaskTimeoutError(uid, f"Stopped waiting for task {uid}: {reason}")
            current = await self.fetch(uid)
            logger.debug(f">> TASK {uid} :: STATUS: {current.status.value}")
            if current.status.is_terminal:
                return current
            await context.sleep(params.interval)
