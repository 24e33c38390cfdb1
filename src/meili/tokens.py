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
"""Tenant tokens for delegated search.

A tenant token is a JWT signed with an API key. It embeds search rules
that the server enforces on every search made with the token, so a
frontend can search with restricted filters without holding the key.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, TypeAlias

import jwt

from .errors import ValidationError

API_KEY_PREFIX_LENGTH = 8
TOKEN_ALGORITHM = 'HS256'

SearchRules: TypeAlias = Mapping[str, Any] | list[str]


def generate_tenant_token(search_rules: SearchRules, api_key: str | None = None,
        expires_at: datetime | None = None, default_api_key: str | None = None,
        now: datetime | None = None) -> str:
    """Build a signed tenant token.

    Args:
        search_rules: Rules applied at search time, either a mapping of
            index name to rules (``{'movies': {'filter': 'genre = horror'}}``,
            ``{'*': {}}``) or a list of index names.
        api_key: Key used to sign the token. Takes precedence over
            ``default_api_key``.
        expires_at: Expiration instant. Naive datetimes are read as UTC.
        default_api_key: Fallback signing key, normally the client's.
        now: Issuance instant, defaults to the current time.

    Returns:
        str: The ``header.claims.signature`` token.

    Raises:
        ValidationError: If ``search_rules`` is empty, no key of at least
            eight characters is available, or ``expires_at`` is not in the
            future. Checked in that order.
    """
    if not search_rules or not isinstance(search_rules, (Mapping, list)):
        raise ValidationError(
            "The search rules added in the token generation must be a non-empty object or array"
        )

    secret = api_key or default_api_key
    if not secret or len(secret) < API_KEY_PREFIX_LENGTH:
        raise ValidationError(
            "The API key used for the token generation must exist and be a valid Meilisearch key"
        )

    if expires_at is not None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if expires_at <= now:
            raise ValidationError("The expires_at value must be a date in the future")

    claims: dict[str, Any] = {
        'searchRules': search_rules if isinstance(search_rules, list) else dict(search_rules),
        'apiKeyPrefix': secret[:API_KEY_PREFIX_LENGTH],
    }
    if expires_at is not None:
        claims['exp'] = math.ceil(expires_at.timestamp())

    return jwt.encode(claims, secret, algorithm=TOKEN_ALGORITHM)
