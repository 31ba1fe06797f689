# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Low-level REST client for the record service.

Builds ``/services/data/v{version}`` URLs, attaches bearer credentials, runs
requests through :class:`~forcemap.core._http._HttpClient` and turns error
responses into :class:`~forcemap.core.errors.HttpError`. Return values are
the decoded JSON bodies; mapping rows to record instances happens in
:class:`~forcemap.client.ForceClient`.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from ..core._http import _HttpClient
from ..core._error_codes import http_subcode, is_transient_status
from ..core.config import ForceConfig
from ..core.errors import HttpError
from ..core.telemetry import create_telemetry_manager

_OK_STATUSES = (200, 201, 202, 204)


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


class _RestClient:
    """
    REST client for one service instance.

    :param auth: Object exposing ``_acquire_token(scope)``.
    :param instance_url: Service instance URL, e.g. ``"https://na1.salesforce.com"``.
    :type instance_url: str
    :param config: Client configuration.
    :type config: ~forcemap.core.config.ForceConfig or None
    :param session: Optional pooled session.
    :type session: requests.Session or None
    :raises ValueError: If ``instance_url`` is empty.
    """

    def __init__(
        self,
        auth: Any,
        instance_url: str,
        config: Optional[ForceConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth = auth
        self.instance_url = (instance_url or "").rstrip("/")
        if not self.instance_url:
            raise ValueError("instance_url is required.")
        self.config = config or ForceConfig.from_env()
        self.api = f"{self.instance_url}/services/data/v{self.config.api_version}"
        self._http = _HttpClient(
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            timeout=self.config.http_timeout,
            max_backoff=self.config.http_max_backoff,
            jitter=self.config.http_jitter if self.config.http_jitter is not None else True,
            retry_transient_errors=(
                self.config.http_retry_transient_errors if self.config.http_retry_transient_errors is not None else True
            ),
            session=session,
        )
        self._telemetry = create_telemetry_manager(self.config.telemetry)

    def _headers(self) -> Dict[str, str]:
        token = self.auth._acquire_token(self.config.token_scope).access_token
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: Optional[str] = None,
        sobject_type: Optional[str] = None,
        expected: Tuple[int, ...] = _OK_STATUSES,
        **kwargs: Any,
    ) -> requests.Response:
        """
        Send one request and raise :class:`HttpError` for unexpected statuses.

        :param method: HTTP verb.
        :param url: Absolute URL.
        :param operation: Operation name used for telemetry.
        :param sobject_type: Record type the request concerns, if any.
        :param expected: Statuses treated as success.
        :return: The response.
        :rtype: requests.Response
        :raises HttpError: If the status is not in ``expected``.
        """
        headers = self._headers()
        headers.update(kwargs.pop("headers", None) or {})
        client_request_id = str(uuid.uuid4())
        with self._telemetry.trace_request(
            operation or method.lower(), method.upper(), url, client_request_id, sobject_type
        ) as ctx:
            response = self._http._request(method, url, headers=headers, **kwargs)
            retry_count = getattr(self._http, "last_retry_count", 0)
            self._telemetry.record_response(ctx, response.status_code, retry_count=retry_count)
            if response.status_code not in expected:
                raise self._error_from_response(response, client_request_id)
        return response

    @staticmethod
    def _error_from_response(response: Any, client_request_id: str) -> HttpError:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        message = None
        service_code = None
        fields: List[str] = []
        if isinstance(body, list) and body and isinstance(body[0], dict):
            first = body[0]
            message = first.get("message")
            service_code = first.get("errorCode")
            fields = list(first.get("fields") or [])
        elif isinstance(body, dict):
            message = body.get("error_description") or body.get("message")
            service_code = body.get("error") or body.get("errorCode")

        text = getattr(response, "text", "") or ""
        if not message:
            message = text.strip()[:200] or f"HTTP {status}"

        retry_after = None
        headers = getattr(response, "headers", None) or {}
        if "Retry-After" in headers:
            try:
                retry_after = int(headers["Retry-After"])
            except (TypeError, ValueError):
                retry_after = None

        return HttpError(
            f"HTTP {status}: {message}",
            status_code=status,
            is_transient=is_transient_status(status),
            subcode=http_subcode(status),
            service_error_code=service_code,
            fields=fields,
            request_id=client_request_id,
            body_excerpt=text[:200] if text else None,
            retry_after=retry_after,
        )

    @staticmethod
    def _json(response: requests.Response) -> Any:
        if response.status_code == 204 or not getattr(response, "text", ""):
            return None
        return response.json()

    # ---------------------------------------------------------------- metadata

    def _describe(self, sobject_type: str) -> Dict[str, Any]:
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/describe"
        return self._json(self._request("get", url, operation="describe", sobject_type=sobject_type))

    def _list_sobjects(self) -> List[Dict[str, Any]]:
        body = self._json(self._request("get", f"{self.api}/sobjects", operation="list_sobjects")) or {}
        return list(body.get("sobjects") or [])

    # ------------------------------------------------------------------- reads

    def _get(self, sobject_type: str, record_id: str) -> Dict[str, Any]:
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/{_segment(record_id)}"
        return self._json(self._request("get", url, operation="find", sobject_type=sobject_type))

    def _query(self, soql: str) -> Dict[str, Any]:
        return self._json(self._request("get", f"{self.api}/query", operation="query", params={"q": soql}))

    def _query_more(self, next_records_url: str) -> Dict[str, Any]:
        url = next_records_url
        if url.startswith("/"):
            url = f"{self.instance_url}{url}"
        return self._json(self._request("get", url, operation="query_more"))

    def _search(self, sosl: str) -> Any:
        return self._json(self._request("get", f"{self.api}/search", operation="search", params={"q": sosl}))

    # ------------------------------------------------------------------ writes

    def _create(self, sobject_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/"
        response = self._request("post", url, operation="create", sobject_type=sobject_type, json=data)
        return self._json(response) or {}

    def _update(self, sobject_type: str, record_id: str, data: Dict[str, Any]) -> None:
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/{_segment(record_id)}"
        self._request("patch", url, operation="update", sobject_type=sobject_type, json=data)

    def _upsert(self, sobject_type: str, field: str, value: Any, data: Dict[str, Any]) -> Tuple[int, Any]:
        """Returns ``(status_code, body)``; 201 means a record was created."""
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/{_segment(field)}/{_segment(value)}"
        response = self._request("patch", url, operation="upsert", sobject_type=sobject_type, json=data)
        return response.status_code, self._json(response)

    def _delete(self, sobject_type: str, record_id: str) -> None:
        url = f"{self.api}/sobjects/{_segment(sobject_type)}/{_segment(record_id)}"
        self._request("delete", url, operation="delete", sobject_type=sobject_type)

    def close(self) -> None:
        self._http.close()


__all__ = ["_RestClient"]
