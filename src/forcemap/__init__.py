# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
forcemap: runtime object mapping for REST record services.

Mapped types are built at runtime from the service's describe response::

    from forcemap import ForceClient, SObject, StaticTokenCredential

    with ForceClient(instance_url, StaticTokenCredential(token)) as client:
        Contact = client.materialize("Contact")
        for contact in Contact.find_all_by_LastName("Smith"):
            print(contact.Email)
"""

from .__version__ import __version__
from .client import ForceClient
from .core._auth import StaticTokenCredential
from .core.config import ForceConfig
from .core.errors import ForceError, HttpError, NoSuchMethodError, NotMaterializedError, UnknownFieldError
from .models.sobject import SObject

__all__ = [
    "__version__",
    "ForceClient",
    "ForceConfig",
    "ForceError",
    "HttpError",
    "NoSuchMethodError",
    "NotMaterializedError",
    "SObject",
    "StaticTokenCredential",
    "UnknownFieldError",
]
