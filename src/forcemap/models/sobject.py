# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Mapped record types.

A mapped type is a subclass of :class:`SObject` that has been materialized
from the service's describe response::

    class Account(SObject):
        pass

    Account.materialize("Account", client)

    acct = Account(Name="Acme")
    acct.save()
    Account.find_by_Name("Acme")

Field access goes through one generic accessor pair that consults the type's
:class:`~forcemap.models.schema.SchemaRegistry`; no per-field code is
generated. Names such as ``find_by_Name_and_City`` are resolved at call time
by :func:`~forcemap.models.dispatch.parse_finder`.

Materialization mutates class state and is serialized per class with a lock.
Instances are not synchronized.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..common.constants import ID_FIELD
from ..core.errors import NoSuchMethodError, NotMaterializedError, UnknownFieldError, ValidationError
from ..core._error_codes import VALIDATION_MISSING_ID
from . import coercion
from .dispatch import FinderKind, FinderRequest, parse_finder
from .query_builder import QueryBuilder
from .schema import PicklistEntry, SchemaRegistry

if TYPE_CHECKING:
    import pandas as pd

_logger = logging.getLogger(__name__)


class _class_or_instance_method:
    """Descriptor binding one function on the class and another on instances."""

    def __init__(self, class_func: Callable, instance_func: Callable) -> None:
        self._class_func = class_func
        self._instance_func = instance_func
        self.__doc__ = instance_func.__doc__

    def __get__(self, obj: Any, owner: type) -> Callable:
        if obj is None:
            return self._class_func.__get__(owner, type(owner))
        return self._instance_func.__get__(obj, owner)


class _SObjectMeta(type):
    """Resolves dynamic finder names on mapped types."""

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        request = parse_finder(name) if name.startswith("find_") else None
        if request is None:
            raise NoSuchMethodError(name, cls.__name__)

        def finder(*args: Any) -> Any:
            return cls._dispatch_finder(request, args)

        finder.__name__ = name
        finder.__qualname__ = f"{cls.__name__}.{name}"
        return finder


def _identity_of(created: Any) -> Any:
    if isinstance(created, SObject):
        return created.to_param()
    if isinstance(created, Mapping):
        return created.get(ID_FIELD, created.get("id"))
    if isinstance(created, str):
        return created
    return getattr(created, ID_FIELD)


class SObject(metaclass=_SObjectMeta):
    """
    Base class for mapped record types.

    :param attributes: Initial field values. Values are coerced to each field's type.
    :type attributes: Mapping[str, Any] or None
    :param client: Transport used by this instance. Defaults to the type's client.
    :param kwargs: Additional field values.
    :raises NotMaterializedError: If the type has not been materialized.
    :raises UnknownFieldError: If an attribute name is not part of the type.
    """

    sobject_type: ClassVar[Optional[str]] = None
    description: ClassVar[Optional[Dict[str, Any]]] = None
    _registry: ClassVar[Optional[SchemaRegistry]] = None
    _client: ClassVar[Any] = None
    _materialize_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._materialize_lock = threading.Lock()

    # ------------------------------------------------------------ materialize

    @classmethod
    def materialize(cls, type_name: str, client: Any = None) -> type:
        """
        Bind this class to a remote record type.

        Requests the type's description from the client, builds the schema
        registry and stores it, the description and the client on the class.
        Errors raised by the client propagate unchanged.

        :param type_name: Remote type name, e.g. ``"Account"``.
        :type type_name: str
        :param client: Transport. Defaults to the client already bound to the class.
        :return: The class itself.
        :raises ValueError: If no client is available.
        """
        with cls._materialize_lock:
            transport = client if client is not None else cls._client
            if transport is None:
                raise ValueError(f"No client available to materialize {type_name}; pass one or call bind_client().")
            description = transport.describe_sobject(type_name)
            registry = SchemaRegistry.build(description.get("fields") or (), sobject_type=type_name)
            cls.sobject_type = type_name
            cls.description = description
            cls._registry = registry
            cls._client = transport
            register = getattr(transport, "register_sobject", None)
            if callable(register):
                register(cls)
        _logger.debug("materialized %s as %s with %d fields", type_name, cls.__name__, len(registry))
        return cls

    @classmethod
    def is_materialized(cls) -> bool:
        return cls._registry is not None

    @classmethod
    def bind_client(cls, client: Any) -> None:
        """Set the transport used by this type and by instances without their own."""
        cls._client = client

    @classmethod
    def registry(cls) -> SchemaRegistry:
        if cls._registry is None:
            raise NotMaterializedError(cls.__name__)
        return cls._registry

    @classmethod
    def _class_client(cls) -> Any:
        if cls._client is None:
            raise ValueError(f"No client bound to {cls.__name__}.")
        return cls._client

    # --------------------------------------------------------------- metadata

    @classmethod
    def attribute_names(cls) -> List[str]:
        """Field names followed by relationship names."""
        return cls.registry().attribute_names()

    @classmethod
    def field_names(cls) -> List[str]:
        return cls.registry().field_names()

    @classmethod
    def field_list(cls) -> str:
        """Comma-separated field names, as projected by :meth:`all`."""
        return ",".join(cls.registry().field_names())

    @classmethod
    def label_for(cls, name: str) -> Optional[str]:
        return cls.registry().label_for(name)

    @classmethod
    def field_type(cls, name: str) -> str:
        return cls.registry().type_of(name)

    @classmethod
    def picklist_values(cls, name: str, controlling_value: Any = None) -> List[PicklistEntry]:
        return cls.registry().picklist_values(name, controlling_value)

    @classmethod
    def updateable(cls, name: str) -> bool:
        return cls.registry().updateable(name)

    @classmethod
    def createable(cls, name: str) -> bool:
        return cls.registry().createable(name)

    @classmethod
    def coerce_params(cls, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Coerce each known field of ``params`` to its native type; other keys pass through."""
        registry = cls.registry()
        return coercion.coerce_params(params, lambda n: registry.type_of(n) if registry.has_field(n) else None)

    # ------------------------------------------------------------------ reads

    @classmethod
    def query_builder(cls) -> QueryBuilder:
        """A :class:`QueryBuilder` projecting every field of this type."""
        return QueryBuilder(cls.sobject_type, cls.registry().field_names())

    @classmethod
    def find(cls, record_id: str) -> "SObject":
        return cls._class_client().find(cls, record_id)

    @classmethod
    def all(cls) -> Any:
        return cls._class_client().query(cls.query_builder().build())

    @classmethod
    def query(cls, conditions: str) -> Any:
        """Run a query with a raw condition clause, e.g. ``"Name = 'foo'"``."""
        return cls._class_client().query(cls.query_builder().filter_raw(conditions).build())

    @classmethod
    def first(cls, conditions: Optional[str] = None) -> Optional["SObject"]:
        return cls._edge(conditions, descending=False)

    @classmethod
    def last(cls, conditions: Optional[str] = None) -> Optional["SObject"]:
        return cls._edge(conditions, descending=True)

    @classmethod
    def _edge(cls, conditions: Optional[str], descending: bool) -> Optional["SObject"]:
        soql = cls.query_builder().filter_raw(conditions or "").order_by(ID_FIELD, descending).limit(1).build()
        return _first_or_none(cls._class_client().query(soql))

    @classmethod
    def count(cls) -> int:
        result = cls._class_client().query(QueryBuilder(cls.sobject_type).count().build())
        return result.total_size

    @classmethod
    def search(cls, sosl: str) -> Any:
        return cls._class_client().search(sosl)

    # ----------------------------------------------------------------- writes

    @classmethod
    def create(cls, attributes: Mapping[str, Any]) -> "SObject":
        """Create a record remotely and return the persisted instance."""
        return cls._class_client().create(cls, attributes)

    @classmethod
    def upsert(cls, field: str, value: Any, attributes: Mapping[str, Any]) -> Any:
        """Insert or update the record whose external id ``field`` equals ``value``."""
        return cls._class_client().upsert(cls.sobject_type, field, value, attributes)

    @classmethod
    def _delete_by_id(cls, record_id: str) -> Any:
        return cls._class_client().delete(cls.sobject_type, record_id)

    # -------------------------------------------------------- dynamic finders

    @classmethod
    def _dispatch_finder(cls, request: FinderRequest, args: Tuple[Any, ...]) -> Any:
        registry = cls.registry()
        for name in request.fields:
            if not registry.has_field(name):
                raise UnknownFieldError(name, cls.sobject_type)

        if len(args) == 1 and isinstance(args[0], Mapping):
            attrs = dict(args[0])
            pairs = [(name, attrs.get(name)) for name in request.fields]
        else:
            if len(args) != len(request.fields):
                raise TypeError(
                    f"{request.kind.value}_{'_and_'.join(request.fields)}() takes {len(request.fields)} "
                    f"argument(s) ({len(args)} given)"
                )
            pairs = list(zip(request.fields, args))
            attrs = dict(pairs)

        handler = _FINDER_HANDLERS[request.kind]
        return handler(cls, pairs, attrs)

    @classmethod
    def _find_by(cls, pairs: List[Tuple[str, Any]], attrs: Dict[str, Any]) -> Optional["SObject"]:
        soql = cls.query_builder().filter_pairs(pairs).limit(1).build()
        return _first_or_none(cls._class_client().query(soql))

    @classmethod
    def _find_all_by(cls, pairs: List[Tuple[str, Any]], attrs: Dict[str, Any]) -> Any:
        return cls._class_client().query(cls.query_builder().filter_pairs(pairs).build())

    @classmethod
    def _find_or_create_by(cls, pairs: List[Tuple[str, Any]], attrs: Dict[str, Any]) -> "SObject":
        found = cls._find_by(pairs, attrs)
        if found is not None:
            return found
        return cls._class_client().create(cls, attrs)

    @classmethod
    def _find_or_initialize_by(cls, pairs: List[Tuple[str, Any]], attrs: Dict[str, Any]) -> "SObject":
        found = cls._find_by(pairs, attrs)
        if found is not None:
            return found
        return cls(attrs)

    # -------------------------------------------------------------- instances

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, client: Any = None, **kwargs: Any) -> None:
        registry = type(self).registry()
        object.__setattr__(self, "_attributes", {name: registry.default_value(name) for name in registry.field_names()})
        object.__setattr__(self, "_changed", set())
        object.__setattr__(self, "_key", uuid.uuid4().hex)
        object.__setattr__(self, "_client", client)
        merged = dict(attributes or {})
        merged.update(kwargs)
        self.attributes = merged

    @classmethod
    def from_row(cls, row: Mapping[str, Any], client: Any = None) -> "SObject":
        """
        Build a persisted-state instance from a service row.

        Known fields are coerced; other keys are kept as-is. No defaults are
        applied and nothing is marked as changed.
        """
        registry = cls.registry()
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_attributes", {})
        object.__setattr__(obj, "_changed", set())
        object.__setattr__(obj, "_key", uuid.uuid4().hex)
        object.__setattr__(obj, "_client", client)
        for name, value in row.items():
            if registry.has_field(name):
                value = coercion.coerce(value, registry.type_of(name))
            obj._attributes[name] = value
        return obj

    @classmethod
    def from_dataframe(cls, df: "pd.DataFrame") -> List["SObject"]:
        """Build one in-memory instance per DataFrame row (missing values are skipped)."""
        from ..utils._pandas import dataframe_to_records

        return [cls(row) for row in dataframe_to_records(df)]

    @property
    def client(self) -> Any:
        """Transport for this instance; falls back to the type's client."""
        return self._client if self._client is not None else type(self)._client

    @client.setter
    def client(self, value: Any) -> None:
        object.__setattr__(self, "_client", value)

    def _require_client(self) -> Any:
        client = self.client
        if client is None:
            raise ValueError(f"No client bound to {type(self).__name__} instance.")
        return client

    def _require_id(self, action: str) -> str:
        record_id = self._attributes.get(ID_FIELD)
        if record_id is None:
            raise ValidationError(
                f"Cannot {action} a {type(self).__name__} without an {ID_FIELD}",
                subcode=VALIDATION_MISSING_ID,
            )
        return record_id

    def _write(self, name: str, value: Any) -> None:
        registry = type(self).registry()
        if registry.has_field(name):
            value = coercion.coerce(value, registry.type_of(name))
        self._attributes[name] = value
        self._changed.add(name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        registry = type(self)._registry
        if registry is not None and registry.has_attribute(name):
            return self._attributes.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return
        registry = type(self).registry()
        if not registry.has_attribute(name):
            raise UnknownFieldError(name, self.sobject_type)
        self._write(name, value)

    def __getitem__(self, name: str) -> Any:
        """Field value, or ``None`` when ``name`` is not an attribute of this type."""
        if not type(self).registry().has_attribute(name):
            return None
        return self._attributes.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        """Set a field value. Unknown names raise :class:`UnknownFieldError`."""
        if not type(self).registry().has_attribute(name):
            raise UnknownFieldError(name, self.sobject_type)
        self._write(name, value)

    def __contains__(self, name: object) -> bool:
        return type(self).registry().has_attribute(name)

    def __dir__(self) -> Iterable[str]:
        names = set(super().__dir__())
        if type(self)._registry is not None:
            names.update(type(self)._registry.attribute_names())
        return sorted(names)

    @property
    def attributes(self) -> Dict[str, Any]:
        """Copy of the attribute map. Assigning a mapping merges it into the instance."""
        return dict(self._attributes)

    @attributes.setter
    def attributes(self, values: Mapping[str, Any]) -> None:
        registry = type(self).registry()
        for name in values:
            if not registry.has_attribute(name):
                raise UnknownFieldError(name, self.sobject_type)
        for name, value in values.items():
            self._write(name, value)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._attributes)

    # -------------------------------------------------------------- lifecycle

    def save(self) -> Any:
        """
        Persist the instance.

        A new instance is created remotely with its createable, non-null
        fields and adopts the returned identity; the instance is returned. A
        persisted instance is updated with its updateable fields (non-null or
        explicitly assigned) and the client's update result is returned.
        """
        registry = type(self).registry()
        client = self._require_client()
        if self.is_new_record():
            payload = {
                name: value
                for name, value in self._attributes.items()
                if registry.has_field(name) and registry.createable(name) and value is not None
            }
            created = client.create(type(self), payload)
            self._attributes[ID_FIELD] = _identity_of(created)
            self._changed.clear()
            return self

        payload = {
            name: value
            for name, value in self._attributes.items()
            if registry.has_field(name) and registry.updateable(name) and (value is not None or name in self._changed)
        }
        result = client.update(type(self), self._attributes[ID_FIELD], payload)
        self._changed.clear()
        return result

    def update(self, attributes: Mapping[str, Any]) -> "SObject":
        """
        Merge ``attributes`` into the instance and send the updateable ones to the service.

        :return: The instance itself.
        :raises ValidationError: If the instance has no identity.
        """
        record_id = self._require_id("update")
        registry = type(self).registry()
        self.attributes = attributes
        payload = {
            name: self._attributes[name]
            for name in attributes
            if registry.has_field(name) and registry.updateable(name)
        }
        self._require_client().update(type(self), record_id, payload)
        self._changed.difference_update(attributes)
        return self

    update_attributes = update

    def update_attribute(self, name: str, value: Any) -> "SObject":
        return self.update({name: value})

    def _delete_self(self) -> "SObject":
        """Delete the record remotely. The in-memory instance is returned unchanged."""
        record_id = self._require_id("delete")
        self._require_client().delete(type(self), record_id)
        return self

    delete = _class_or_instance_method(_delete_by_id.__func__, _delete_self)

    def reload(self) -> "SObject":
        """Re-fetch the record by identity and replace the attribute map in place."""
        record_id = self._require_id("reload")
        fetched = self._require_client().find(type(self), record_id)
        object.__setattr__(self, "_attributes", dict(fetched.attributes))
        self._changed.clear()
        return self

    # ---------------------------------------------------------------- identity

    def is_persisted(self) -> bool:
        return self._attributes.get(ID_FIELD) is not None

    def is_new_record(self) -> bool:
        return self._attributes.get(ID_FIELD) is None

    def to_key(self) -> List[str]:
        """Opaque per-instance key, distinct even for instances with equal attributes."""
        return [self._key]

    def to_param(self) -> Optional[str]:
        return self._attributes.get(ID_FIELD)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SObject) or other.sobject_type != self.sobject_type:
            return False
        mine = self._attributes.get(ID_FIELD)
        theirs = other._attributes.get(ID_FIELD)
        return mine is not None and theirs is not None and mine == theirs

    def __hash__(self) -> int:
        return hash(self.sobject_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"


def _first_or_none(result: Any) -> Any:
    if not result:
        return None
    return result[0]


_FINDER_HANDLERS: Dict[FinderKind, Callable[..., Any]] = {
    FinderKind.FIND_BY: lambda cls, pairs, attrs: cls._find_by(pairs, attrs),
    FinderKind.FIND_ALL_BY: lambda cls, pairs, attrs: cls._find_all_by(pairs, attrs),
    FinderKind.FIND_OR_CREATE_BY: lambda cls, pairs, attrs: cls._find_or_create_by(pairs, attrs),
    FinderKind.FIND_OR_INITIALIZE_BY: lambda cls, pairs, attrs: cls._find_or_initialize_by(pairs, attrs),
}


__all__ = ["SObject"]
