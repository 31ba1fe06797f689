# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured error types for forcemap.

All errors raised by the mapping layer derive from :class:`ForceError`.
:class:`UnknownFieldError` and :class:`NoSuchMethodError` also derive from the
built-in :class:`ValueError` and :class:`AttributeError` respectively, so
``hasattr`` and ordinary ``except ValueError`` handlers keep working.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional

from ._error_codes import (
    VALIDATION_UNKNOWN_FIELD,
    VALIDATION_NO_SUCH_METHOD,
    METADATA_NOT_MATERIALIZED,
)


class ForceError(Exception):
    """
    Base structured error for forcemap.

    :param message: Human readable message.
    :type message: str
    :param code: Error category (``validation_error``, ``metadata_error``, ``http_error``).
    :type code: str
    :param subcode: Optional finer-grained code from :mod:`forcemap.core._error_codes`.
    :type subcode: str | None
    :param status_code: HTTP status for server errors.
    :type status_code: int | None
    :param details: Additional diagnostic fields.
    :type details: dict | None
    :param source: ``"client"`` or ``"server"``.
    :type source: str | None
    :param is_transient: Whether retrying may succeed.
    :type is_transient: bool
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Return the error as a JSON-friendly dictionary."""
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(ForceError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class UnknownFieldError(ValidationError, ValueError):
    """Raised when a field name is not part of a mapped type's schema."""

    def __init__(self, field_name: str, sobject_type: Optional[str] = None) -> None:
        where = f" on {sobject_type}" if sobject_type else ""
        super().__init__(
            f"Unknown field {field_name!r}{where}",
            subcode=VALIDATION_UNKNOWN_FIELD,
            details={"field": field_name, "sobject_type": sobject_type},
        )
        self.field_name = field_name
        self.sobject_type = sobject_type


class NoSuchMethodError(ValidationError, AttributeError):
    """Raised when a dynamically dispatched name matches no finder pattern."""

    def __init__(self, method_name: str, owner: Optional[str] = None) -> None:
        where = f"{owner}." if owner else ""
        super().__init__(
            f"No such method: {where}{method_name}",
            subcode=VALIDATION_NO_SUCH_METHOD,
            details={"method": method_name, "owner": owner},
        )
        self.method_name = method_name


class MetadataError(ForceError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="metadata_error", subcode=subcode, details=details, source="client")


class NotMaterializedError(MetadataError):
    """Raised when a mapped-type operation runs before ``materialize``."""

    def __init__(self, class_name: str) -> None:
        super().__init__(
            f"{class_name} has not been materialized; call {class_name}.materialize(type_name) first",
            subcode=METADATA_NOT_MATERIALIZED,
            details={"class": class_name},
        )


class HttpError(ForceError):
    """Error returned by the remote record service."""

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        service_error_code: Optional[str] = None,
        fields: Optional[list] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if fields:
            d["fields"] = list(fields)
        if request_id is not None:
            d["request_id"] = request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        if retry_after is not None:
            d["retry_after"] = retry_after
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )


__all__ = [
    "ForceError",
    "ValidationError",
    "UnknownFieldError",
    "NoSuchMethodError",
    "MetadataError",
    "NotMaterializedError",
    "HttpError",
]
