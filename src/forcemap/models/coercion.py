# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Conversion between wire values and native Python values.

:func:`coerce` turns a raw value received from the service (or typed by a
user) into the native type for a field type tag; :func:`serialize` performs
the reverse for outbound payloads and filter literals.

Malformed ``date`` and ``datetime`` input does not raise: it is replaced by
the current date or timestamp. Finder and creator code paths rely on this.
"""

from __future__ import annotations

import datetime as _dt
import re
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.constants import (
    FIELD_TYPE_BOOLEAN,
    FIELD_TYPE_DATE,
    FIELD_TYPE_DATETIME,
    FIELD_TYPE_INT,
    FLOAT_FIELD_TYPES,
)

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", ""})

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DATETIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,6})\d*)?"
    r"(Z|[+-]\d{2}:?\d{2})$"
)


def _today() -> _dt.date:
    return _dt.date.today()


def _now() -> _dt.datetime:
    return _dt.datetime.now().astimezone()


def _coerce_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return bool(raw)


def _coerce_float(raw: Any) -> Any:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        try:
            return float(raw)
        except ValueError:
            return raw
    return raw


def _coerce_int(raw: Any) -> Any:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw)
        except ValueError:
            return raw
    return raw


def parse_date(text: str) -> Optional[_dt.date]:
    """Parse a strict ``YYYY-MM-DD`` string, or return ``None``."""
    m = _DATE_RE.match(text)
    if not m:
        return None
    try:
        return _dt.date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def parse_datetime(text: str) -> Optional[_dt.datetime]:
    """
    Parse a strict ISO-8601 timestamp carrying a timezone designator.

    Accepts ``Z``, ``+HH:MM`` and ``+HHMM`` offsets and up to microsecond
    fractions (longer fractions are truncated). Returns ``None`` on failure.
    """
    m = _DATETIME_RE.match(text)
    if not m:
        return None
    year, month, day, hour, minute, second, fraction, zone = m.groups()
    micros = int(fraction.ljust(6, "0")) if fraction else 0
    if zone == "Z":
        tz = _dt.timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        digits = zone[1:].replace(":", "")
        offset = _dt.timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        try:
            tz = _dt.timezone(sign * offset)
        except ValueError:
            return None
    try:
        return _dt.datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
        )
    except ValueError:
        return None


def _coerce_date(raw: Any) -> _dt.date:
    if isinstance(raw, _dt.datetime):
        return raw.date()
    if isinstance(raw, _dt.date):
        return raw
    if isinstance(raw, str):
        parsed = parse_date(raw.strip())
        if parsed is not None:
            return parsed
    return _today()


def _coerce_datetime(raw: Any) -> _dt.datetime:
    if isinstance(raw, _dt.datetime):
        return raw
    if isinstance(raw, str):
        parsed = parse_datetime(raw.strip())
        if parsed is not None:
            return parsed
    return _now()


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    FIELD_TYPE_BOOLEAN: _coerce_boolean,
    FIELD_TYPE_INT: _coerce_int,
    FIELD_TYPE_DATE: _coerce_date,
    FIELD_TYPE_DATETIME: _coerce_datetime,
}
for _t in FLOAT_FIELD_TYPES:
    _COERCERS[_t] = _coerce_float


def coerce(raw: Any, field_type: Optional[str]) -> Any:
    """
    Convert a raw value to the native type for ``field_type``.

    ``None`` is returned unchanged for every type. Unknown type tags pass the
    value through.

    :param raw: Value received from the service or supplied by the caller.
    :param field_type: Field type tag from the describe call (``"boolean"``, ``"date"``, ...).
    :type field_type: str or None
    :return: Native value.

    Example::

        coerce("1", "boolean")             # True
        coerce("123.4", "currency")        # 123.4
        coerce("2010-04-01", "date")       # datetime.date(2010, 4, 1)
        coerce("bogus", "date")            # today's date
    """
    if raw is None:
        return None
    coercer = _COERCERS.get((field_type or "").lower())
    if coercer is None:
        return raw
    return coercer(raw)


def format_datetime(value: _dt.datetime) -> str:
    """
    Render a timestamp with millisecond precision and a ``+HH:MM`` offset.

    Naive timestamps are interpreted in local time.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.astimezone()
    text = value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}"
    seconds = int(value.utcoffset().total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def serialize(value: Any) -> Any:
    """
    Convert a native value to its outbound wire form.

    ``datetime`` values become ISO-8601 strings (see :func:`format_datetime`),
    ``date`` values become ``YYYY-MM-DD``; everything else is returned unchanged.
    """
    if isinstance(value, _dt.datetime):
        return format_datetime(value)
    if isinstance(value, _dt.date):
        return value.isoformat()
    return value


def serialize_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply :func:`serialize` to every value of a mapping."""
    return {key: serialize(value) for key, value in params.items()}


def coerce_params(params: Mapping[str, Any], type_lookup: Callable[[str], Optional[str]]) -> Dict[str, Any]:
    """
    Coerce every value of ``params`` using ``type_lookup(name)`` for its type.

    ``type_lookup`` returns ``None`` for names it does not know; those values
    pass through unchanged.
    """
    return {key: coerce(value, type_lookup(key)) for key, value in params.items()}


__all__ = [
    "coerce",
    "coerce_params",
    "serialize",
    "serialize_params",
    "format_datetime",
    "parse_date",
    "parse_datetime",
]
