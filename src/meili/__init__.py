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
"""Meilisearch Python client library.

Provides the ``Meilisearch`` async client for a Meilisearch search server
over HTTP. Every call goes through ``_send_request``, which validates the
status code, classifies failures and decodes the JSON body. Mutating
calls return a ``TaskInfo`` handle; ``wait_for_task`` polls it until the
server has applied the change.

Configuration is read from environment variables (``MEILISEARCH_HOST``,
``MEILISEARCH_API_KEY``, ``MEILISEARCH_TIMEOUT``,
``MEILISEARCH_WAIT_TIMEOUT``, ``MEILISEARCH_POLL_INTERVAL``), with
optional overrides from Django settings. A module-level ``client``
singleton is created at import time using these defaults.

Example:
    >>> from meili import client
    >>> task = await client.index('movies').add_documents([{'id': 1, 'title': 'Alien'}])
    >>> task = await client.wait_for_task(task)
    >>> results = await client.index('movies').search('alien')
    >>> results.hits
    [...]
"""
from __future__ import annotations

import os
import json
import logging
from collections.abc import Callable, Collection
from datetime import datetime, timezone
from typing import Any, TypeVar
from urllib.parse import quote

try:
    import httpx
except ImportError:
    raise ImportError("Meilisearch requires the installation of the httpx module.")

from .errors import (
    ApiError,
    BatchSubmitError,
    CommunicationError,
    DecodeError,
    MeilisearchError,
    NotFoundError,
    TaskTimeoutError,
    ValidationError,
)
from .index import Index
from .models import NA, DictObject, Task, TaskInfo, TaskStatus, task_list
from .tasks import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WAIT_TIMEOUT,
    TaskPoller,
    TaskRef,
    WaitContext,
    WaitParams,
)
from .tokens import SearchRules, generate_tenant_token


__version__ = '1.0.0'
__all__ = [
    'Meilisearch',
    'Index',
    'Task',
    'TaskInfo',
    'TaskStatus',
    'WaitContext',
    'WaitParams',
    'MeilisearchError',
    'CommunicationError',
    'ApiError',
    'NotFoundError',
    'DecodeError',
    'TaskTimeoutError',
    'ValidationError',
    'BatchSubmitError',
    'NA',
    'client',
    'MEILISEARCH_HOST',
    'MEILISEARCH_API_KEY',
    'MEILISEARCH_TIMEOUT',
    'MEILISEARCH_WAIT_TIMEOUT',
    'MEILISEARCH_POLL_INTERVAL',
]

logger = logging.getLogger('meili')

T = TypeVar('T')

USER_AGENT = f'pymeili/{__version__}'
JSON_CONTENT_TYPE = 'application/json'
KEY_EXPIRY_FORMAT = '%Y-%m-%dT%H:%M:%S'

MEILISEARCH_HOST = os.environ.get('MEILISEARCH_HOST', 'http://127.0.0.1:7700')
MEILISEARCH_API_KEY = os.environ.get('MEILISEARCH_API_KEY')
MEILISEARCH_TIMEOUT = os.environ.get('MEILISEARCH_TIMEOUT')
MEILISEARCH_WAIT_TIMEOUT = os.environ.get('MEILISEARCH_WAIT_TIMEOUT', DEFAULT_WAIT_TIMEOUT)
MEILISEARCH_POLL_INTERVAL = os.environ.get('MEILISEARCH_POLL_INTERVAL', DEFAULT_POLL_INTERVAL)

try:
    from django.conf import settings
    MEILISEARCH_HOST = getattr(settings, 'MEILISEARCH_HOST', MEILISEARCH_HOST)
    MEILISEARCH_API_KEY = getattr(settings, 'MEILISEARCH_API_KEY', MEILISEARCH_API_KEY)
    MEILISEARCH_TIMEOUT = getattr(settings, 'MEILISEARCH_TIMEOUT', MEILISEARCH_TIMEOUT)
    MEILISEARCH_WAIT_TIMEOUT = getattr(settings, 'MEILISEARCH_WAIT_TIMEOUT', MEILISEARCH_WAIT_TIMEOUT)
    MEILISEARCH_POLL_INTERVAL = getattr(settings, 'MEILISEARCH_POLL_INTERVAL', MEILISEARCH_POLL_INTERVAL)
except Exception:
    settings = None


class Meilisearch:
    """Async client for a Meilisearch server.

    Holds read-only configuration and shares one ``httpx.AsyncClient``
    connection pool, so a single instance can serve concurrent callers.

    Attributes:
        host: Base URL of the server, without trailing slash.
        api_key: Key sent as a bearer token and used to sign tenant tokens.
        timeout: Per-request timeout in seconds, or ``None`` for the httpx
            default.
        poller: ``TaskPoller`` used by ``wait_for_task``.
        NotFoundError: Reference to the ``NotFoundError`` exception class.
        NA: Sentinel object indicating no default value was provided.

    Example:
        >>> client = Meilisearch(host='localhost:7700', api_key='masterKey')
        >>> task = await client.create_index('movies', primary_key='id')
        >>> await client.wait_for_task(task)
    """

    NotFoundError = NotFoundError
    NA = NA

    session = httpx.AsyncClient(
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=100),
        trust_env=False,
        follow_redirects=False,
    )

    def __init__(self, host: str | None = None, api_key: str | None = None,
            timeout: float | str | None = None,
            wait_params: WaitParams | None = None,
            session: httpx.AsyncClient | None = None) -> None:
        """Initialize the client.

        Args:
            host: Server URL. A missing scheme defaults to ``http://``.
                Defaults to ``MEILISEARCH_HOST``.
            api_key: API key. Defaults to ``MEILISEARCH_API_KEY``.
            timeout: Request timeout in seconds. Defaults to
                ``MEILISEARCH_TIMEOUT``.
            wait_params: Default policy for ``wait_for_task``. Defaults to
                ``MEILISEARCH_WAIT_TIMEOUT`` / ``MEILISEARCH_POLL_INTERVAL``
                (5 seconds, polling every 50 milliseconds).
            session: Custom ``httpx.AsyncClient``. Defaults to the shared
                class-level session.
        """
        if host is None:
            host = MEILISEARCH_HOST
        if api_key is None:
            api_key = MEILISEARCH_API_KEY
        if timeout is None:
            timeout = MEILISEARCH_TIMEOUT
        if wait_params is None:
            wait_params = WaitParams(
                timeout=float(MEILISEARCH_WAIT_TIMEOUT),
                interval=float(MEILISEARCH_POLL_INTERVAL),
            )
        if '://' not in host:
            host = f'http://{host}'
        self.host = host.rstrip('/')
        self.api_key = api_key or None
        self.timeout = float(timeout) if timeout is not None else None
        if session is not None:
            self.session = session
        self.poller = TaskPoller(self.get_task, default_wait=wait_params)

        self.DoesNotExist = NotFoundError

    def _build_url(self, endpoint: str) -> str:
        return f'{self.host}/{endpoint.lstrip("/")}'

    def _build_headers(self, content_type: str | None) -> dict[str, str]:
        headers = {
            'accept': JSON_CONTENT_TYPE,
            'user-agent': USER_AGENT,
        }
        if self.api_key:
            headers['authorization'] = f'Bearer {self.api_key}'
        if content_type:
            headers['content-type'] = content_type
        return headers

    @staticmethod
    def _build_params(params: dict | None) -> dict | None:
        if not params:
            return None
        return {
            k: ('true' if v else 'false') if isinstance(v, bool)
            else ','.join(str(i) for i in v) if isinstance(v, (list, tuple, set))
            else v
            for k, v in params.items()
            if v is not None
        }

    @staticmethod
    def _api_error(res: httpx.Response) -> ApiError:
        error_class = NotFoundError if res.status_code == 404 else ApiError
        try:
            payload = json.loads(res.content) if res.content else None
        except ValueError:
            payload = None
        if isinstance(payload, dict) and 'message' in payload:
            return error_class(
                res.status_code,
                res.content,
                message=payload.get('message'),
                code=payload.get('code'),
                type=payload.get('type'),
                link=payload.get('link'),
            )
        return error_class(res.status_code, res.content)

    async def _send_request(self, method: str, endpoint: str, body: Any = None,
            params: dict | None = None, accepted: Collection[int] = (200,),
            decoder: Callable[[Any], T] | None = None,
            content_type: str = JSON_CONTENT_TYPE,
            default: Any = NA) -> T | DictObject | bytes | None:
        """Send an HTTP request to the Meilisearch server.

        Central method through which every API operation is routed. Builds
        the URL and headers, serializes the body, checks the status code
        against ``accepted`` and decodes the response.

        Args:
            method: HTTP method (``'GET'``, ``'POST'``, ...).
            endpoint: Path relative to the host, e.g. ``'/indexes/movies'``.
            body: Request body. Serialized as JSON when ``content_type`` is
                JSON and the body is not already ``str`` or ``bytes``.
            params: Query parameters. ``None`` values are dropped, booleans
                are sent as ``true``/``false`` and sequences comma-joined.
            accepted: Status codes considered a success.
            decoder: Callable turning the decoded JSON into the result type,
                e.g. ``Task.from_dict``. Without one, JSON bodies come back
                as ``DictObject``, empty bodies as ``None`` and other content
                types as raw bytes.
            content_type: ``Content-Type`` of the request body.
            default: Value returned on a 404 instead of raising
                ``NotFoundError``.

        Returns:
            The decoded response.

        Raises:
            CommunicationError: If the request could not be sent or no
                response was received.
            NotFoundError: On an unaccepted 404 and no ``default``.
            ApiError: On any other unaccepted status code.
            DecodeError: If the body does not decode to the expected shape.
            ValidationError: If ``body`` cannot be serialized.
        """
        url = self._build_url(endpoint)
        headers = self._build_headers(content_type if body is not None else None)
        params = self._build_params(params)

        kwargs: dict[str, Any] = {'headers': headers}
        if params:
            kwargs['params'] = params
        if self.timeout is not None:
            kwargs['timeout'] = self.timeout

        if body is not None:
            if logger.isEnabledFor(logging.DEBUG):
                try:
                    verb_body = json.dumps(body, ensure_ascii=True)
                except (TypeError, ValueError):
                    verb_body = body
                logger.debug(f">> {method} {url}  ::  BODY: {verb_body}  ::  PARAMS: {params}")
            if JSON_CONTENT_TYPE in content_type and not isinstance(body, (str, bytes)):
                try:
                    body = json.dumps(body, ensure_ascii=True)
                except (TypeError, ValueError) as exc:
                    raise ValidationError(f"Request body is not JSON serializable: {exc}") from exc
            kwargs['content'] = body
        else:
            logger.debug(f">> {method} {url}  ::  PARAMS: {params}")

        try:
            res = await self.session.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.debug(f">> {method} {url}  ::  TRANSPORT ERROR: {exc!r}")
            raise CommunicationError(f"{method} {url} failed: {exc}") from exc

        if res.status_code not in accepted:
            if res.status_code == 404 and default is not NA:
                return default
            error = self._api_error(res)
            logger.debug(f">> {method} {url}  ::  REJECTED: {error}")
            raise error

        if decoder is None:
            if not res.content:
                return None
            if JSON_CONTENT_TYPE not in res.headers.get('content-type', ''):
                return res.content
            try:
                return json.loads(res.content, object_pairs_hook=DictObject)
            except ValueError as exc:
                raise DecodeError(f"Invalid JSON in response to {method} {url}", res.content) from exc

        if not res.content:
            raise DecodeError(f"Empty response to {method} {url}", res.content)
        try:
            content = json.loads(res.content, object_pairs_hook=DictObject)
        except ValueError as exc:
            raise DecodeError(f"Invalid JSON in response to {method} {url}", res.content) from exc
        try:
            return decoder(content)
        except DecodeError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"Unexpected response to {method} {url}: {exc}", content) from exc

    # Indexes

    def index(self, uid: str) -> Index:
        """Return a local handle on an index. No request is made."""
        return Index(self, uid)

    async def get_index(self, uid: str, default: Any = NA) -> Index | Any:
        """Fetch an index and its metadata.

        Args:
            uid: Index identifier.
            default: Value to return if the index does not exist. If not
                provided, a ``NotFoundError`` is raised on 404.

        Returns:
            Index: The index, or ``default``.
        """
        return await self._send_request(
            'GET', f'/indexes/{quote(uid, safe="")}',
            decoder=lambda data: Index.from_dict(self, data),
            default=default,
        )

    async def get_raw_index(self, uid: str) -> DictObject:
        return await self._send_request('GET', f'/indexes/{quote(uid, safe="")}')

    async def get_indexes(self, offset: int | None = None, limit: int | None = None) -> list[Index]:
        return await self._send_request(
            'GET', '/indexes', params=dict(offset=offset, limit=limit),
            decoder=lambda data: Index.list_from_dict(self, data))

    async def get_raw_indexes(self, offset: int | None = None,
            limit: int | None = None) -> DictObject | list:
        return await self._send_request('GET', '/indexes', params=dict(offset=offset, limit=limit))

    async def create_index(self, uid: str, primary_key: str | None = None) -> TaskInfo:
        """Create an index.

        Args:
            uid: Identifier of the new index.
            primary_key: Document attribute used as primary key. Inferred
                by the server from the first documents when omitted.

        Returns:
            TaskInfo: Handle on the index creation task.
        """
        body = {'uid': uid}
        if primary_key is not None:
            body['primaryKey'] = primary_key
        return await self._send_request(
            'POST', '/indexes', body=body, accepted=(202,), decoder=TaskInfo.from_dict)

    async def delete_index(self, uid: str) -> TaskInfo:
        return await self._send_request(
            'DELETE', f'/indexes/{quote(uid, safe="")}', accepted=(202,), decoder=TaskInfo.from_dict)

    # Tasks

    async def get_task(self, uid: int) -> Task:
        return await self._send_request('GET', f'/tasks/{int(uid)}', decoder=Task.from_dict)

    async def get_tasks(self, **filters) -> list[Task]:
        """List tasks, optionally filtered.

        Args:
            **filters: Query filters forwarded as-is, e.g.
                ``indexUids=['movies']``, ``statuses=['failed']``,
                ``limit=20``.
        """
        return await self._send_request('GET', '/tasks', params=filters, decoder=task_list)

    async def wait_for_task(self, task: TaskRef, wait_params: WaitParams | None = None) -> Task:
        """Wait until a task is ``succeeded`` or ``failed``.

        Without ``wait_params`` the client's default policy applies (5
        seconds overall, polling every 50 milliseconds, unless configured
        otherwise). A failed task is returned, not raised.

        Args:
            task: ``TaskInfo``, ``Task`` or task uid.
            wait_params: Wait policy for this call only.

        Returns:
            Task: The task in its terminal state.

        Raises:
            TaskTimeoutError: If the wait ends before a terminal status.
        """
        return await self.poller.wait(task, wait_params)

    # Keys

    async def get_keys(self, offset: int | None = None, limit: int | None = None) -> DictObject:
        return await self._send_request('GET', '/keys', params=dict(offset=offset, limit=limit))

    async def get_key(self, key: str) -> DictObject:
        return await self._send_request('GET', f'/keys/{quote(key, safe="")}')

    async def create_key(self, actions: list[str], indexes: list[str],
            expires_at: datetime | None = None, description: str | None = None,
            name: str | None = None, uid: str | None = None) -> DictObject:
        """Create an API key.

        Args:
            actions: Allowed actions, e.g. ``['search']`` or ``['*']``.
            indexes: Accessible indexes, ``['*']`` for all.
            expires_at: Expiration instant, ``None`` for a key that never
                expires. Aware datetimes are converted to UTC.
            description: Free-form description.
            name: Human readable name.
            uid: Explicit key uid (UUID v4).

        Returns:
            DictObject: The created key, including its ``key`` secret.
        """
        body: dict[str, Any] = {
            'actions': actions,
            'indexes': indexes,
            'expiresAt': _format_key_expiry(expires_at),
        }
        if description is not None:
            body['description'] = description
        if name is not None:
            body['name'] = name
        if uid is not None:
            body['uid'] = uid
        return await self._send_request('POST', '/keys', body=body, accepted=(201,))

    async def update_key(self, key: str, description: str | None = None,
            name: str | None = None) -> DictObject:
        body = {
            k: v for k, v in (('description', description), ('name', name))
            if v is not None
        }
        return await self._send_request('PATCH', f'/keys/{quote(key, safe="")}', body=body)

    async def delete_key(self, key: str) -> bool:
        await self._send_request('DELETE', f'/keys/{quote(key, safe="")}', accepted=(204,))
        return True

    # Instance

    async def get_stats(self) -> DictObject:
        return await self._send_request('GET', '/stats')

    async def create_dump(self) -> TaskInfo:
        return await self._send_request('POST', '/dumps', accepted=(202,), decoder=TaskInfo.from_dict)

    async def health(self) -> DictObject:
        return await self._send_request('GET', '/health')

    async def is_healthy(self) -> bool:
        try:
            await self.health()
        except MeilisearchError:
            return False
        return True

    async def version(self) -> DictObject:
        return await self._send_request('GET', '/version')

    def generate_tenant_token(self, search_rules: SearchRules, api_key: str | None = None,
            expires_at: datetime | None = None) -> str:
        """Generate a tenant token restricted by ``search_rules``.

        Signed with ``api_key`` when given, else with the client's key. No
        request is made.

        Args:
            search_rules: Mapping of index name to search rules, or a list
                of index names.
            api_key: Parent key of the token.
            expires_at: Expiration instant, must be in the future.

        Returns:
            str: The signed token.

        Raises:
            ValidationError: If the rules are empty, no key is available or
                ``expires_at`` is in the past.
        """
        return generate_tenant_token(
            search_rules,
            api_key=api_key,
            expires_at=expires_at,
            default_api_key=self.api_key,
        )


def _format_key_expiry(expires_at: datetime | None) -> str | None:
    if expires_at is None:
        return None
    if expires_at.tzinfo is not None:
        expires_at = expires_at.astimezone(timezone.utc)
    return expires_at.strftime(KEY_EXPIRY_FORMAT)


client = Meilisearch(host=MEILISEARCH_HOST, api_key=MEILISEARCH_API_KEY, timeout=MEILISEARCH_TIMEOUT)
