# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for field metadata and the schema registry."""

import pytest

from forcemap.core.errors import MetadataError, UnknownFieldError
from forcemap.models.schema import FieldDescription, PicklistEntry, SchemaRegistry


@pytest.fixture
def registry(describe):
    return SchemaRegistry.build(describe["fields"], sobject_type="TestClass")


class TestFieldDescription:
    def test_from_api_response(self):
        desc = FieldDescription.from_api_response(
            {
                "name": "Industry",
                "type": "Picklist",
                "label": "Industry",
                "createable": True,
                "updateable": False,
                "picklistValues": [{"value": "Banking", "label": "Banking", "active": True}],
            }
        )
        assert desc.name == "Industry"
        assert desc.type == "picklist"
        assert desc.createable is True
        assert desc.updateable is False
        assert desc.picklist_values == (PicklistEntry(value="Banking", label="Banking"),)

    def test_missing_name_raises(self):
        with pytest.raises(MetadataError):
            FieldDescription.from_api_response({"type": "string"})

    def test_missing_type_defaults_to_string(self):
        assert FieldDescription.from_api_response({"name": "Foo"}).type == "string"


class TestPicklistEntry:
    def test_boolean_controlling_values_are_normalized(self):
        entry = PicklistEntry.from_api_response({"value": "x", "controllingValues": [True]})
        assert entry.controlling_values == ("true",)

    def test_to_dict(self):
        entry = PicklistEntry(value="one", label="One", valid_for="gA==")
        assert entry.to_dict() == {
            "value": "one",
            "label": "One",
            "active": True,
            "defaultValue": False,
            "validFor": "gA==",
        }


class TestSchemaRegistry:
    def test_field_names_keep_describe_order(self, registry, describe):
        assert registry.field_names() == [f["name"] for f in describe["fields"]]

    def test_relationship_names_follow_fields(self, registry):
        assert registry.relationship_names() == ["Owner"]
        assert registry.attribute_names()[-1] == "Owner"
        assert registry.has_attribute("Owner")
        assert not registry.has_field("Owner")

    def test_duplicate_field_raises(self):
        fields = [{"name": "Name", "type": "string"}, {"name": "Name", "type": "string"}]
        with pytest.raises(MetadataError) as ei:
            SchemaRegistry.build(fields, sobject_type="Dup")
        assert ei.value.details["field"] == "Name"

    def test_lookups(self, registry):
        assert registry.label_for("Picklist_Field") == "Picklist Label"
        assert registry.type_of("Checkbox_Field") == "boolean"
        assert registry.updateable("Name") is True
        assert registry.updateable("Id") is False
        assert registry.createable("IsDeleted") is False
        assert registry.default_value("Status_Field") == "New"
        assert registry.default_value("Name") is None

    def test_unknown_field_raises(self, registry):
        for lookup in (registry.label_for, registry.type_of, registry.updateable, registry.createable):
            with pytest.raises(UnknownFieldError) as ei:
                lookup("Nope")
            assert ei.value.field_name == "Nope"
            assert isinstance(ei.value, ValueError)

    def test_picklist_values(self, registry):
        values = registry.picklist_values("Picklist_Field")
        assert [p.value for p in values] == ["one", "two", "three"]

    def test_dependent_picklist_values(self, registry):
        assert [p.value for p in registry.picklist_values("Dependent_Picklist_Field", "one")] == ["alpha", "beta"]
        assert [p.value for p in registry.picklist_values("Dependent_Picklist_Field", "two")] == ["alpha"]
        assert registry.picklist_values("Dependent_Picklist_Field", "three") == []

    def test_dependent_picklist_unknown_controller_value(self, registry):
        assert registry.picklist_values("Dependent_Picklist_Field", "nope") == []

    def test_dependent_picklist_with_boolean_controller(self):
        fields = [
            {"name": "Flag", "type": "boolean"},
            {
                "name": "Choice",
                "type": "picklist",
                "controllerName": "Flag",
                "picklistValues": [
                    {"value": "off-only", "validFor": "gA=="},
                    {"value": "on-only", "validFor": "QA=="},
                ],
            },
        ]
        registry = SchemaRegistry.build(fields)
        assert [p.value for p in registry.picklist_values("Choice", False)] == ["off-only"]
        assert [p.value for p in registry.picklist_values("Choice", True)] == ["on-only"]

    def test_dependent_picklist_with_explicit_controlling_values(self):
        fields = [
            {"name": "Region", "type": "picklist", "picklistValues": [{"value": "EU"}, {"value": "US"}]},
            {
                "name": "Country",
                "type": "picklist",
                "controllerName": "Region",
                "picklistValues": [
                    {"value": "France", "controllingValues": ["EU"]},
                    {"value": "Ohio", "controllingValues": ["US"]},
                ],
            },
        ]
        registry = SchemaRegistry.build(fields)
        assert [p.value for p in registry.picklist_values("Country", "EU")] == ["France"]

    def test_container_protocol(self, registry, describe):
        assert "Name" in registry
        assert "Owner" in registry
        assert "Nope" not in registry
        assert len(registry) == len(describe["fields"])
        assert [d.name for d in registry][0] == "Id"
