# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Mapping layer for forcemap.

- :mod:`~forcemap.models.coercion`: wire value to native value conversion.
- :mod:`~forcemap.models.schema`: per-type field metadata.
- :mod:`~forcemap.models.query_builder`: query text construction.
- :mod:`~forcemap.models.dispatch`: dynamic finder name parsing.
- :mod:`~forcemap.models.sobject`: :class:`~forcemap.models.sobject.SObject` base class.
- :mod:`~forcemap.models.collection`: paged query results.

Note:
    This ``__init__.py`` does NOT import/export models; import directly from
    the specific module files.
"""

__all__ = []
