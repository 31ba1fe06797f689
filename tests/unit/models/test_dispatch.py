# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from forcemap.core.errors import NoSuchMethodError
from forcemap.models.dispatch import FinderKind, FinderRequest, parse_finder


class TestParseFinder:
    @pytest.mark.parametrize(
        "name, kind, fields",
        [
            ("find_by_Name", FinderKind.FIND_BY, ("Name",)),
            ("find_all_by_Name_and_City", FinderKind.FIND_ALL_BY, ("Name", "City")),
            ("find_or_create_by_Name", FinderKind.FIND_OR_CREATE_BY, ("Name",)),
            ("find_or_initialize_by_Name_and_City", FinderKind.FIND_OR_INITIALIZE_BY, ("Name", "City")),
        ],
    )
    def test_kinds(self, name, kind, fields):
        assert parse_finder(name) == FinderRequest(kind=kind, fields=fields)

    def test_underscores_inside_field_names_are_kept(self):
        assert parse_finder("find_by_Email__c_and_Picklist_Field").fields == ("Email__c", "Picklist_Field")

    @pytest.mark.parametrize("name", ["find_by_", "find_by", "find_name", "search_by_Name", "find_by_Name_and_"])
    def test_unmatched_names_raise(self, name):
        with pytest.raises(NoSuchMethodError) as ei:
            parse_finder(name)
        assert isinstance(ei.value, AttributeError)
        assert ei.value.method_name == name
