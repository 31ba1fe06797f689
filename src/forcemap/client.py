# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import requests

from azure.core.credentials import TokenCredential

from .common.constants import AGGREGATE_RESULT_TYPE, ID_FIELD, ROW_ATTRIBUTES_KEY
from .core._auth import _AuthManager
from .core.config import ForceConfig
from .data._rest import _RestClient
from .models.coercion import serialize_params
from .models.collection import RecordCollection
from .models.sobject import SObject

_logger = logging.getLogger(__name__)

SObjectRef = Union[str, Type[SObject]]


class ForceClient:
    """
    Client for a REST record service.

    Implements the transport interface used by :class:`~forcemap.models.sobject.SObject`
    and delegates HTTP work to an internal :class:`~forcemap.data._rest._RestClient`.
    Query and find results come back as mapped instances; each row's
    ``attributes.type`` tag selects the mapped class, materializing it on
    first use.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager enables connection pooling and
        closes the session on exit::

            with ForceClient(instance_url, credential) as client:
                Account = client.materialize("Account")
                Account.find_by_Name("Acme")

    :param instance_url: Service instance URL, for example
        ``"https://na1.salesforce.com"``. Trailing slash is automatically removed.
    :type instance_url: :class:`str`
    :param credential: Credential used to obtain bearer tokens. Use
        :class:`~forcemap.core._auth.StaticTokenCredential` for an already-issued session token.
    :type credential: ~azure.core.credentials.TokenCredential
    :param config: Optional configuration. Defaults to :meth:`ForceConfig.from_env`.
    :type config: ~forcemap.core.config.ForceConfig or None

    :raises ValueError: If ``instance_url`` is missing or empty after trimming.

    Example::

        from forcemap import ForceClient, SObject, StaticTokenCredential

        client = ForceClient("https://na1.salesforce.com", StaticTokenCredential(token))

        class Account(SObject):
            pass

        Account.materialize("Account", client)
        acct = Account.find_or_create_by_Name("Acme")
        acct.update({"Phone": "555-0100"})
    """

    def __init__(
        self,
        instance_url: str,
        credential: TokenCredential,
        config: Optional[ForceConfig] = None,
    ) -> None:
        self.auth = _AuthManager(credential)
        self._instance_url = (instance_url or "").rstrip("/")
        if not self._instance_url:
            raise ValueError("instance_url is required.")
        self._config = config or ForceConfig.from_env()
        self._rest: Optional[_RestClient] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False
        self._types: Dict[str, Type[SObject]] = {}
        self._types_lock = threading.RLock()

    def __enter__(self) -> "ForceClient":
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the HTTP session (if owned) and the internal REST client.

        Safe to call multiple times. Materialized classes stay bound to the
        client; a later call opens a fresh REST client.
        """
        if self._rest is not None:
            self._rest.close()
            self._rest = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_rest(self) -> _RestClient:
        if self._rest is None:
            self._rest = _RestClient(self.auth, self._instance_url, self._config, session=self._session)
        return self._rest

    # ------------------------------------------------------------ mapped types

    def materialize(self, *names: str) -> Union[Type[SObject], List[Type[SObject]]]:
        """
        Return mapped classes for the given type names, creating them on first use.

        Classes are cached per client; a class defined by the caller and
        materialized against this client takes the place of a generated one.

        :param names: Remote type names.
        :return: One class for a single name, otherwise a list in the given order.
        :raises ValueError: If no name is given.
        """
        if not names:
            raise ValueError("At least one type name is required.")
        classes = [self._materialize_one(name) for name in names]
        return classes[0] if len(classes) == 1 else classes

    def _materialize_one(self, name: str) -> Type[SObject]:
        with self._types_lock:
            cls = self._types.get(name)
            if cls is None:
                cls = type(name, (SObject,), {"__module__": __name__})
                cls.materialize(name, self)
                _logger.debug("generated mapped class for %s", name)
        return cls

    def register_sobject(self, cls: Type[SObject]) -> None:
        """Record ``cls`` as the mapped class for its type name. Called by ``SObject.materialize``."""
        with self._types_lock:
            self._types[cls.sobject_type] = cls

    def _class_for(self, sobject: SObjectRef) -> Type[SObject]:
        if isinstance(sobject, type) and issubclass(sobject, SObject):
            return sobject
        return self._materialize_one(sobject)

    @staticmethod
    def _type_name(sobject: SObjectRef) -> str:
        if isinstance(sobject, type) and issubclass(sobject, SObject):
            return sobject.sobject_type
        return sobject

    def _map_row(self, row: Mapping[str, Any], default: Optional[Type[SObject]] = None) -> Any:
        data = dict(row)
        tag = data.pop(ROW_ATTRIBUTES_KEY, None)
        type_name = tag.get("type") if isinstance(tag, Mapping) else None
        for key, value in data.items():
            if isinstance(value, Mapping):
                if "records" in value:
                    data[key] = self._to_collection(value)
                elif ROW_ATTRIBUTES_KEY in value:
                    data[key] = self._map_row(value)
        if default is not None and type_name in (None, default.sobject_type):
            return default.from_row(data, client=self)
        if type_name is None or type_name == AGGREGATE_RESULT_TYPE:
            return data
        return self._materialize_one(type_name).from_row(data, client=self)

    def _to_collection(self, envelope: Optional[Mapping[str, Any]]) -> RecordCollection:
        envelope = envelope or {}
        return RecordCollection(
            [self._map_row(r) for r in envelope.get("records") or ()],
            total_size=envelope.get("totalSize"),
            next_page_url=envelope.get("nextRecordsUrl"),
            client=self,
        )

    # ---------------------------------------------------------------- metadata

    def describe_sobject(self, name: str) -> Dict[str, Any]:
        """
        Fetch the description of a remote record type.

        :param name: Remote type name.
        :return: Description with a ``fields`` list.
        :rtype: dict
        :raises ~forcemap.core.errors.HttpError: If the service rejects the request.
        """
        return self._get_rest()._describe(name)

    def list_sobjects(self) -> List[Dict[str, Any]]:
        """List the record types available to the session (``name``, ``label``, ...)."""
        return self._get_rest()._list_sobjects()

    # ------------------------------------------------------------------- reads

    def find(self, sobject: SObjectRef, record_id: str) -> SObject:
        """Fetch one record by identity as an instance of the mapped class."""
        cls = self._class_for(sobject)
        return self._map_row(self._get_rest()._get(cls.sobject_type, record_id), default=cls)

    def query(self, soql: str) -> RecordCollection:
        """
        Run a query and map each row to its mapped class.

        :param soql: Query text, e.g. ``"SELECT Id,Name FROM Account LIMIT 10"``.
        :return: First page of results.
        :rtype: ~forcemap.models.collection.RecordCollection
        """
        return self._to_collection(self._get_rest()._query(soql))

    def next_page(self, collection: RecordCollection) -> RecordCollection:
        """Fetch the page following ``collection``."""
        if not collection.next_page_url:
            return RecordCollection(total_size=collection.total_size, client=self)
        return self._to_collection(self._get_rest()._query_more(collection.next_page_url))

    def search(self, sosl: str) -> RecordCollection:
        """Run a full-text search. Results may mix record types."""
        body = self._get_rest()._search(sosl)
        if isinstance(body, Mapping):
            rows = body.get("searchRecords") or []
        else:
            rows = body or []
        return RecordCollection([self._map_row(r) for r in rows], client=self)

    # ------------------------------------------------------------------ writes

    def create(self, sobject: SObjectRef, attributes: Mapping[str, Any]) -> SObject:
        """
        Create a record.

        :return: Persisted instance carrying the sent attributes and the new ``Id``.
        """
        cls = self._class_for(sobject)
        result = self._get_rest()._create(cls.sobject_type, serialize_params(attributes))
        row = dict(attributes)
        row[ID_FIELD] = result.get("id")
        return cls.from_row(row, client=self)

    def update(self, sobject: SObjectRef, record_id: str, attributes: Mapping[str, Any]) -> bool:
        """Update fields of an existing record. Returns ``True`` on success."""
        self._get_rest()._update(self._type_name(sobject), record_id, serialize_params(attributes))
        return True

    def upsert(self, sobject: SObjectRef, field: str, value: Any, attributes: Mapping[str, Any]) -> bool:
        """
        Insert or update the record whose external id ``field`` equals ``value``.

        :return: ``True`` if a record was created, ``False`` if one was updated.
        """
        status, body = self._get_rest()._upsert(self._type_name(sobject), field, value, serialize_params(attributes))
        if isinstance(body, Mapping) and "created" in body:
            return bool(body["created"])
        return status == 201

    def delete(self, sobject: SObjectRef, record_id: str) -> bool:
        """Delete a record by identity. Returns ``True`` on success."""
        self._get_rest()._delete(self._type_name(sobject), record_id)
        return True


__all__ = ["ForceClient"]
