# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Field metadata models and the per-type schema registry.

A :class:`SchemaRegistry` is built once from the ``fields`` list of a describe
response and answers every metadata question the mapping layer asks: field
type, label, permissions, defaults and (dependent) picklist values. All
lookups are dictionary reads; unknown names raise
:class:`~forcemap.core.errors.UnknownFieldError`.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..common.constants import FIELD_TYPE_BOOLEAN
from ..core.errors import MetadataError, UnknownFieldError
from ..core._error_codes import METADATA_DUPLICATE_FIELD


@dataclass(frozen=True)
class PicklistEntry:
    """
    One allowed value of a picklist field.

    :param value: API value submitted to the service.
    :type value: str
    :param label: Display label.
    :type label: str | None
    :param active: Whether the value can currently be selected.
    :type active: bool
    :param default_value: Whether this is the field's default.
    :type default_value: bool
    :param valid_for: Base64 bitmap of controlling values (dependent picklists only).
    :type valid_for: str | None
    :param controlling_values: Explicit controlling values, used when no bitmap is given.
    :type controlling_values: tuple[str, ...]
    """

    value: str
    label: Optional[str] = None
    active: bool = True
    default_value: bool = False
    valid_for: Optional[str] = None
    controlling_values: Tuple[str, ...] = ()

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> "PicklistEntry":
        controlling = data.get("controllingValues") or ()
        if isinstance(controlling, str):
            controlling = (controlling,)
        return cls(
            value=data.get("value"),
            label=data.get("label"),
            active=bool(data.get("active", True)),
            default_value=bool(data.get("defaultValue", False)),
            valid_for=data.get("validFor"),
            controlling_values=tuple(_controller_key(v) for v in controlling),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "label": self.label,
            "active": self.active,
            "defaultValue": self.default_value,
            "validFor": self.valid_for,
        }


@dataclass(frozen=True)
class FieldDescription:
    """
    Metadata for a single remote field.

    Example::

        desc = FieldDescription.from_api_response({
            "name": "Industry", "type": "picklist", "label": "Industry",
            "createable": True, "updateable": True,
            "picklistValues": [{"value": "Banking", "label": "Banking"}],
        })
    """

    name: str
    type: str
    label: Optional[str] = None
    updateable: bool = False
    createable: bool = False
    default_value_formula: Any = None
    relationship_name: Optional[str] = None
    picklist_values: Tuple[PicklistEntry, ...] = ()
    controller_name: Optional[str] = None
    nillable: bool = True
    length: Optional[int] = None
    reference_to: Tuple[str, ...] = ()

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> "FieldDescription":
        """
        Create a FieldDescription from one entry of a describe response's ``fields`` list.

        :param data: Raw field mapping.
        :type data: Mapping[str, Any]
        :raises MetadataError: If the mapping has no ``name``.
        """
        name = data.get("name")
        if not name:
            raise MetadataError("Field description is missing 'name'", details={"field": dict(data)})
        return cls(
            name=name,
            type=(data.get("type") or "string").lower(),
            label=data.get("label"),
            updateable=bool(data.get("updateable", False)),
            createable=bool(data.get("createable", False)),
            default_value_formula=data.get("defaultValueFormula"),
            relationship_name=data.get("relationshipName") or None,
            picklist_values=tuple(PicklistEntry.from_api_response(p) for p in data.get("picklistValues") or ()),
            controller_name=data.get("controllerName") or None,
            nillable=bool(data.get("nillable", True)),
            length=data.get("length"),
            reference_to=tuple(data.get("referenceTo") or ()),
        )


def _controller_key(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _valid_for_indices(bitmap: str) -> List[int]:
    """Decode a ``validFor`` bitmap into controlling-value indices (MSB first)."""
    try:
        raw = base64.b64decode(bitmap)
    except (binascii.Error, ValueError):
        return []
    indices = []
    for byte_index, byte in enumerate(raw):
        for bit in range(8):
            if byte & (0x80 >> bit):
                indices.append(byte_index * 8 + bit)
    return indices


class SchemaRegistry:
    """
    Immutable index over the fields of one mapped type.

    :param fields: Field descriptions in describe order.
    :type fields: Iterable[FieldDescription]
    :param sobject_type: Type name, used in error messages.
    :type sobject_type: str | None
    :raises MetadataError: If two fields share a name.
    """

    def __init__(self, fields: Iterable[FieldDescription], sobject_type: Optional[str] = None) -> None:
        self.sobject_type = sobject_type
        by_name: Dict[str, FieldDescription] = {}
        for desc in fields:
            if desc.name in by_name:
                raise MetadataError(
                    f"Duplicate field {desc.name!r} in description of {sobject_type or 'type'}",
                    subcode=METADATA_DUPLICATE_FIELD,
                    details={"field": desc.name, "sobject_type": sobject_type},
                )
            by_name[desc.name] = desc
        self._fields: Mapping[str, FieldDescription] = MappingProxyType(by_name)
        self._field_names: Tuple[str, ...] = tuple(by_name)

        relationships = []
        for desc in by_name.values():
            rel = desc.relationship_name
            if rel and rel not in by_name and rel not in relationships:
                relationships.append(rel)
        self._relationship_names: Tuple[str, ...] = tuple(relationships)
        self._attribute_names = frozenset(self._field_names + self._relationship_names)

        self._dependent_index: Mapping[str, Mapping[str, Tuple[PicklistEntry, ...]]] = MappingProxyType(
            {desc.name: MappingProxyType(self._index_dependent(desc)) for desc in by_name.values() if desc.controller_name}
        )

    @classmethod
    def build(
        cls,
        field_descriptions: Iterable[Union[FieldDescription, Mapping[str, Any]]],
        sobject_type: Optional[str] = None,
    ) -> "SchemaRegistry":
        """
        Build a registry from field descriptions or raw describe mappings.

        Example::

            registry = SchemaRegistry.build(describe["fields"], sobject_type="Account")
            registry.type_of("Industry")  # "picklist"
        """
        descs = [d if isinstance(d, FieldDescription) else FieldDescription.from_api_response(d) for d in field_descriptions]
        return cls(descs, sobject_type=sobject_type)

    def _index_dependent(self, desc: FieldDescription) -> Dict[str, Tuple[PicklistEntry, ...]]:
        controller = self._fields.get(desc.controller_name)
        if controller is None:
            return {}
        if controller.type == FIELD_TYPE_BOOLEAN:
            controller_values = ["false", "true"]
        else:
            controller_values = [_controller_key(p.value) for p in controller.picklist_values]

        index: Dict[str, List[PicklistEntry]] = {}
        for entry in desc.picklist_values:
            if entry.valid_for:
                keys = [controller_values[i] for i in _valid_for_indices(entry.valid_for) if i < len(controller_values)]
            else:
                keys = list(entry.controlling_values)
            for key in keys:
                index.setdefault(key, []).append(entry)
        return {key: tuple(entries) for key, entries in index.items()}

    def _get(self, name: str) -> FieldDescription:
        try:
            return self._fields[name]
        except (KeyError, TypeError):
            raise UnknownFieldError(name, self.sobject_type) from None

    def field_names(self) -> List[str]:
        """Field names in describe order."""
        return list(self._field_names)

    def relationship_names(self) -> List[str]:
        """Relationship accessor names that are not also field names."""
        return list(self._relationship_names)

    def attribute_names(self) -> List[str]:
        """Field names followed by relationship names."""
        return list(self._field_names + self._relationship_names)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def has_attribute(self, name: str) -> bool:
        return name in self._attribute_names

    def describe(self, name: str) -> FieldDescription:
        return self._get(name)

    def label_for(self, name: str) -> Optional[str]:
        return self._get(name).label

    def type_of(self, name: str) -> str:
        return self._get(name).type

    def updateable(self, name: str) -> bool:
        return self._get(name).updateable

    def createable(self, name: str) -> bool:
        return self._get(name).createable

    def default_value(self, name: str) -> Any:
        return self._get(name).default_value_formula

    def picklist_values(self, name: str, controlling_value: Any = None) -> List[PicklistEntry]:
        """
        Picklist entries of ``name``, optionally restricted to a controlling value.

        For a dependent picklist, passing the controlling field's current value
        returns the entries valid for it; an unknown controlling value yields an
        empty list.

        :raises UnknownFieldError: If ``name`` is not a field of this type.
        """
        desc = self._get(name)
        if controlling_value is None:
            return list(desc.picklist_values)
        index = self._dependent_index.get(name)
        if index is None:
            return []
        return list(index.get(_controller_key(controlling_value), ()))

    def __contains__(self, name: object) -> bool:
        return name in self._attribute_names

    def __iter__(self):
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)


__all__ = ["PicklistEntry", "FieldDescription", "SchemaRegistry"]
