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
"""Splitting bulk document writes into ordered chunks.

Example:
    >>> list(chunked([1, 2, 3, 4, 5], 2))
    [[1, 2], [3, 4], [5]]
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from typing import Any

from .errors import BatchSubmitError, ValidationError
from .models import TaskInfo

logger = logging.getLogger('meili')

DEFAULT_BATCH_SIZE = 1000


def _check_batch_size(batch_size: int) -> None:
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        raise ValidationError(f"Batch size must be an integer, got {batch_size!r}")
    if batch_size <= 0:
        raise ValidationError(f"Batch size must be greater than zero, got {batch_size}")


def chunked(documents: Sequence[Any], batch_size: int) -> Iterator[list[Any]]:
    """Yield contiguous chunks of at most ``batch_size`` documents.

    Only the last chunk may be smaller. Concatenating the chunks gives back
    ``documents`` in its original order.

    Raises:
        ValidationError: If ``batch_size`` is not a positive integer.
    """
    _check_batch_size(batch_size)
    for start in range(0, len(documents), batch_size):
        yield list(documents[start:start + batch_size])


async def submit_in_batches(
        submit: Callable[[list[Any], str | None], Awaitable[TaskInfo]],
        documents: Sequence[Any], batch_size: int = DEFAULT_BATCH_SIZE,
        primary_key: str | None = None) -> list[TaskInfo]:
    """Submit ``documents`` chunk by chunk, in order.

    Each chunk is sent once the previous one was accepted; nothing waits for
    the resulting tasks to finish. Submission stops at the first failure.

    Args:
        submit: Coroutine function sending one chunk, e.g.
            ``Index.add_documents``. Called as ``submit(chunk, primary_key)``.
        documents: The documents to write.
        batch_size: Maximum number of documents per chunk.
        primary_key: Primary key passed along with every chunk.

    Returns:
        list[TaskInfo]: One handle per chunk, in submission order.

    Raises:
        ValidationError: If ``batch_size`` is not a positive integer. No
            request is made.
        BatchSubmitError: If a chunk fails. Earlier chunks stay accepted;
            the original error is the ``__cause__``.
    """
    _check_batch_size(batch_size)
    submitted: list[TaskInfo] = []
    for chunk_index, chunk in enumerate(chunked(documents, batch_size)):
        try:
            task = await submit(chunk, primary_key)
        except Exception as exc:
            logger.debug(f">> BATCH CHUNK {chunk_index} FAILED :: {exc}")
            raise BatchSubmitError(chunk_index, submitted) from exc
        logger.debug(f">> BATCH CHUNK {chunk_index} :: {len(chunk)} DOCUMENTS :: TASK {task.task_uid}")
        submitted.append(task)
    return submitted
