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
"""Index-scoped operations.

An ``Index`` is a lightweight handle (client + uid); creating one makes no
request. Document writes return ``TaskInfo`` handles, and the ``*_in_batches``
variants split large collections into several writes.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .batches import DEFAULT_BATCH_SIZE, submit_in_batches
from .errors import DecodeError
from .models import NA, DictObject, Task, TaskInfo

if TYPE_CHECKING:
    from . import Meilisearch
    from .tasks import TaskRef, WaitParams

_CAMEL_RE = re.compile(r'_([a-z])')


def _camel(name: str) -> str:
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)


class Index:
    """Handle on one index of a Meilisearch server.

    Attributes:
        client: The ``Meilisearch`` client used for requests.
        uid: Index identifier.
        primary_key: Primary key, if known.
        created_at: Creation timestamp, as sent by the server.
        updated_at: Last update timestamp, as sent by the server.
    """

    def __init__(self, client: Meilisearch, uid: str, primary_key: str | None = None,
            created_at: str | None = None, updated_at: str | None = None) -> None:
        self.client = client
        self.uid = uid
        self.primary_key = primary_key
        self.created_at = created_at
        self.updated_at = updated_at

    def __repr__(self) -> str:
        return f'<Index {self.uid!r} primary_key={self.primary_key!r}>'

    @classmethod
    def from_dict(cls, client: Meilisearch, data: Any) -> Index:
        if not isinstance(data, dict) or 'uid' not in data:
            raise DecodeError("Expected an index object with a uid", data)
        return cls(
            client,
            data['uid'],
            primary_key=data.get('primaryKey'),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
        )

    @classmethod
    def list_from_dict(cls, client: Meilisearch, data: Any) -> list[Index]:
        """Decode a ``GET /indexes`` body, paginated or a legacy plain list."""
        results = data.get('results') if isinstance(data, dict) else data
        if not isinstance(results, list):
            raise DecodeError("Expected a list of indexes", data)
        return [cls.from_dict(client, item) for item in results]

    @property
    def _path(self) -> str:
        return f'/indexes/{quote(self.uid, safe="")}'

    async def fetch_info(self) -> Index:
        """Refresh ``primary_key`` and timestamps from the server."""
        info = await self.client._send_request(
            'GET', self._path, decoder=lambda data: Index.from_dict(self.client, data))
        self.primary_key = info.primary_key
        self.created_at = info.created_at
        self.updated_at = info.updated_at
        return self

    async def update(self, primary_key: str) -> TaskInfo:
        return await self.client._send_request(
            'PATCH', self._path, body={'primaryKey': primary_key},
            accepted=(202,), decoder=TaskInfo.from_dict)

    async def delete(self) -> TaskInfo:
        return await self.client.delete_index(self.uid)

    # Documents

    async def get_document(self, id: str | int, fields: list[str] | None = None,
            default: Any = NA) -> DictObject | Any:
        """Retrieve one document by primary key.

        Args:
            id: Document identifier.
            fields: Attributes to return. All of them when omitted.
            default: Value to return if the document is not found. If not
                provided, a ``NotFoundError`` is raised on 404.
        """
        return await self.client._send_request(
            'GET', f'{self._path}/documents/{quote(str(id), safe="")}',
            params=dict(fields=fields), default=default)

    async def get_documents(self, offset: int | None = None, limit: int | None = None,
            fields: list[str] | None = None) -> DictObject:
        return await self.client._send_request(
            'GET', f'{self._path}/documents',
            params=dict(offset=offset, limit=limit, fields=fields))

    async def add_documents(self, documents: Sequence[Any] | str | bytes,
            primary_key: str | None = None,
            content_type: str = 'application/json') -> TaskInfo:
        """Add documents, replacing existing ones with the same primary key.

        Args:
            documents: List of documents, or an already-encoded payload when
                ``content_type`` is ``application/x-ndjson`` or ``text/csv``.
            primary_key: Primary key to set if the index has none yet.
            content_type: Payload format.

        Returns:
            TaskInfo: Handle on the document addition task.
        """
        return await self.client._send_request(
            'POST', f'{self._path}/documents', body=documents,
            params=dict(primaryKey=primary_key), accepted=(202,),
            decoder=TaskInfo.from_dict, content_type=content_type)

    async def update_documents(self, documents: Sequence[Any] | str | bytes,
            primary_key: str | None = None,
            content_type: str = 'application/json') -> TaskInfo:
        """Add documents, merging fields into existing ones with the same
        primary key.
        """
        return await self.client._send_request(
            'PUT', f'{self._path}/documents', body=documents,
            params=dict(primaryKey=primary_key), accepted=(202,),
            decoder=TaskInfo.from_dict, content_type=content_type)

    async def add_documents_in_batches(self, documents: Sequence[Any],
            batch_size: int = DEFAULT_BATCH_SIZE,
            primary_key: str | None = None) -> list[TaskInfo]:
        """Add documents in chunks of ``batch_size``, one task per chunk.

        Chunks are sent in order and the call returns once all of them are
        accepted, without waiting for the tasks to finish.

        Raises:
            ValidationError: If ``batch_size`` is not a positive integer.
            BatchSubmitError: If a chunk fails; earlier chunks stay
                accepted and later ones are not sent.
        """
        return await submit_in_batches(self.add_documents, documents, batch_size, primary_key)

    async def update_documents_in_batches(self, documents: Sequence[Any],
            batch_size: int = DEFAULT_BATCH_SIZE,
            primary_key: str | None = None) -> list[TaskInfo]:
        return await submit_in_batches(self.update_documents, documents, batch_size, primary_key)

    async def delete_document(self, id: str | int) -> TaskInfo:
        return await self.client._send_request(
            'DELETE', f'{self._path}/documents/{quote(str(id), safe="")}',
            accepted=(202,), decoder=TaskInfo.from_dict)

    async def delete_documents(self, ids: list[str | int]) -> TaskInfo:
        return await self.client._send_request(
            'POST', f'{self._path}/documents/delete-batch', body=list(ids),
            accepted=(202,), decoder=TaskInfo.from_dict)

    async def delete_all_documents(self) -> TaskInfo:
        return await self.client._send_request(
            'DELETE', f'{self._path}/documents', accepted=(202,), decoder=TaskInfo.from_dict)

    # Search

    async def search(self, query: str | None = None, **params) -> DictObject:
        """Search the index.

        Args:
            query: Query string. ``None`` matches every document.
            **params: Search parameters, in snake_case or camelCase, e.g.
                ``limit=10``, ``filter='genre = horror'``,
                ``attributes_to_retrieve=['title']``.

        Returns:
            DictObject: Search results with ``hits``, ``query`` and
                pagination fields.
        """
        body: dict[str, Any] = {'q': query}
        body.update((_camel(k), v) for k, v in params.items() if v is not None)
        return await self.client._send_request('POST', f'{self._path}/search', body=body)

    # Settings

    async def get_settings(self) -> DictObject:
        return await self.client._send_request('GET', f'{self._path}/settings')

    async def update_settings(self, settings: dict[str, Any]) -> TaskInfo:
        return await self.client._send_request(
            'PATCH', f'{self._path}/settings', body=settings,
            accepted=(202,), decoder=TaskInfo.from_dict)

    async def reset_settings(self) -> TaskInfo:
        return await self.client._send_request(
            'DELETE', f'{self._path}/settings', accepted=(202,), decoder=TaskInfo.from_dict)

    async def get_stats(self) -> DictObject:
        return await self.client._send_request('GET', f'{self._path}/stats')

    async def wait_for_task(self, task: TaskRef, wait_params: WaitParams | None = None) -> Task:
        return await self.client.wait_for_task(task, wait_params)
