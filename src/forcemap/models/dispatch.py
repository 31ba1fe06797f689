# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Parsing of dynamic finder names.

``find_by_Name_and_City`` and friends are not defined on mapped types; the
name is parsed here into a :class:`FinderRequest` and handled by
:class:`~forcemap.models.sobject.SObject`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..core.errors import NoSuchMethodError

FIELD_SEPARATOR = "_and_"


class FinderKind(str, Enum):
    FIND_BY = "find_by"
    FIND_ALL_BY = "find_all_by"
    FIND_OR_CREATE_BY = "find_or_create_by"
    FIND_OR_INITIALIZE_BY = "find_or_initialize_by"


# Longest prefixes first so "find_by_" never shadows the others.
_PREFIXES = sorted(FinderKind, key=lambda k: len(k.value), reverse=True)

_FIELD_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class FinderRequest:
    """
    A parsed finder call.

    :param kind: Operation to perform.
    :type kind: FinderKind
    :param fields: Field names in call order.
    :type fields: tuple[str, ...]
    """

    kind: FinderKind
    fields: Tuple[str, ...]


def parse_finder(name: str) -> FinderRequest:
    """
    Parse a finder method name.

    Field names follow the kind prefix and are separated by ``_and_``
    (case-sensitive); underscores inside a field name are kept.

    :param name: Method name, e.g. ``"find_or_create_by_Name_and_Email__c"``.
    :type name: str
    :return: Parsed request.
    :rtype: FinderRequest
    :raises NoSuchMethodError: If the name matches no finder pattern.

    Example::

        parse_finder("find_all_by_Name_and_City")
        # FinderRequest(kind=FinderKind.FIND_ALL_BY, fields=("Name", "City"))
    """
    for kind in _PREFIXES:
        prefix = kind.value + "_"
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        fields = tuple(rest.split(FIELD_SEPARATOR))
        if not rest or not all(_FIELD_RE.match(f) for f in fields):
            break
        return FinderRequest(kind=kind, fields=fields)
    raise NoSuchMethodError(name)


__all__ = ["FIELD_SEPARATOR", "FinderKind", "FinderRequest", "parse_finder"]
