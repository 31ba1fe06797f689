# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with automatic retry logic, timeout handling, and optional session support.

This module provides :class:`~forcemap.core._http._HttpClient`, a wrapper around the
requests library that retries transient network errors and transient HTTP statuses
with exponential backoff, and applies per-method default timeouts.
"""

from __future__ import annotations

import random
import time
from typing import Any, Optional

import requests

from ._error_codes import TRANSIENT_STATUS


class _HttpClient:
    """
    HTTP client with configurable retry logic, timeout handling, and optional session support.

    :param retries: Maximum number of attempts. Default is 5.
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between attempts. Default is 0.5.
    :type backoff: :class:`float` | None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param max_backoff: Upper bound for a single delay. Default is 60.0.
    :type max_backoff: :class:`float` | None
    :param jitter: Add +/-25% random variation to delays.
    :type jitter: :class:`bool`
    :param retry_transient_errors: Retry 429/502/503/504 responses.
    :type retry_transient_errors: :class:`bool`
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        *,
        max_backoff: Optional[float] = None,
        jitter: bool = True,
        retry_transient_errors: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_attempts = max(1, retries if retries is not None else 5)
        self.base_delay = backoff if backoff is not None else 0.5
        self.max_backoff = max_backoff if max_backoff is not None else 60.0
        self.default_timeout: Optional[float] = timeout
        self.jitter = jitter
        self.retry_transient_errors = retry_transient_errors
        self._session = session
        self.last_retry_count = 0

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with retry and timeout management.

        Applies default timeouts based on HTTP method (120s for POST/PATCH/DELETE,
        10s for others) and retries network errors and transient statuses.

        :raises requests.exceptions.RequestException: If all attempts fail.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "patch", "delete") else 10

        self.last_retry_count = 0
        for attempt in range(self.max_attempts):
            try:
                if self._session is not None:
                    response = self._session.request(method, url, **kwargs)
                else:
                    response = requests.request(method, url, **kwargs)
            except requests.exceptions.RequestException:
                if attempt == self.max_attempts - 1:
                    raise
                self.last_retry_count += 1
                time.sleep(self._calculate_retry_delay(attempt))
                continue

            if (
                self.retry_transient_errors
                and response.status_code in TRANSIENT_STATUS
                and attempt < self.max_attempts - 1
            ):
                self.last_retry_count += 1
                time.sleep(self._calculate_retry_delay(attempt, response))
                continue
            return response

        raise RuntimeError("Unexpected end of retry loop")

    def _calculate_retry_delay(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        """
        Delay before the next attempt.

        A valid integer ``Retry-After`` header wins (capped at ``max_backoff``);
        otherwise ``base_delay * 2**attempt`` capped at ``max_backoff``, with
        optional +/-25% jitter. Never negative.
        """
        if response is not None and "Retry-After" in response.headers:
            try:
                return min(int(response.headers["Retry-After"]), self.max_backoff)
            except (ValueError, TypeError):
                pass

        delay = min(self.base_delay * (2**attempt), self.max_backoff)
        if self.jitter:
            jitter_range = delay * 0.25
            delay = max(0, delay + random.uniform(-jitter_range, jitter_range))
        return delay

    def close(self) -> None:
        """Close the underlying session, if any. Safe to call multiple times."""
        if self._session is not None:
            self._session.close()
            self._session = None
