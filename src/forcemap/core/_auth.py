# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Credential handling for the REST transport."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

from azure.core.credentials import AccessToken, TokenCredential


@dataclass
class _TokenPair:
    scope: str
    access_token: str


class StaticTokenCredential(TokenCredential):
    """
    Credential wrapping an already-issued session token.

    Useful when the token comes from an outside login flow (for example an
    OAuth callback) and only needs to be replayed on each request.

    :param token: Bearer token string.
    :type token: str
    :param expires_on: Expiry as a POSIX timestamp. Defaults to one hour from now.
    :type expires_on: int or None
    """

    def __init__(self, token: str, expires_on: Optional[int] = None) -> None:
        if not token:
            raise ValueError("token is required.")
        self._token = token
        self._expires_on = expires_on if expires_on is not None else int(time.time()) + 3600

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        return AccessToken(self._token, self._expires_on)


class _AuthManager:
    """Azure Core credential adapter used by the REST client."""

    def __init__(self, credential: TokenCredential) -> None:
        if not isinstance(credential, TokenCredential):
            raise TypeError("credential must implement azure.core.credentials.TokenCredential.")
        self.credential: TokenCredential = credential

    def _acquire_token(self, scope: str) -> _TokenPair:
        """Acquire an access token for the given scope."""
        token = self.credential.get_token(scope)
        return _TokenPair(scope=scope, access_token=token.token)
