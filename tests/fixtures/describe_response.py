# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Sample describe responses for forcemap tests.
"""


def _field(name, type_, label=None, createable=True, updateable=True, **extra):
    data = {
        "name": name,
        "type": type_,
        "label": label or name.replace("_", " "),
        "createable": createable,
        "updateable": updateable,
        "defaultValueFormula": None,
        "relationshipName": None,
        "picklistValues": [],
        "nillable": True,
    }
    data.update(extra)
    return data


def _picklist(value, label=None, **extra):
    entry = {"value": value, "label": label or value.title(), "active": True, "defaultValue": False}
    entry.update(extra)
    return entry


# Describe response for a custom type exercising every coerced field type
TEST_CLASS_DESCRIBE = {
    "name": "TestClass",
    "label": "Test Class",
    "fields": [
        _field("Id", "id", label="Record ID", createable=False, updateable=False),
        _field("Name", "string"),
        _field("City", "string"),
        _field("IsDeleted", "boolean", label="Deleted", createable=False, updateable=False),
        _field("Status_Field", "string", createable=False, updateable=False, defaultValueFormula="New"),
        _field("Checkbox_Field", "boolean"),
        _field("Currency_Field", "currency"),
        _field("Percent_Field", "percent"),
        _field("Number_Field", "double"),
        _field("Integer_Field", "int"),
        _field("Date_Field", "date"),
        _field("DateTime_Field", "datetime"),
        _field("Email_Field", "email"),
        _field(
            "Picklist_Field",
            "picklist",
            label="Picklist Label",
            picklistValues=[_picklist("one"), _picklist("two"), _picklist("three")],
        ),
        _field(
            "Dependent_Picklist_Field",
            "picklist",
            controllerName="Picklist_Field",
            picklistValues=[
                _picklist("alpha", validFor="wA=="),
                _picklist("beta", validFor="gA=="),
                _picklist("gamma", validFor="AA=="),
            ],
        ),
        _field("OwnerId", "reference", label="Owner ID", relationshipName="Owner", referenceTo=["User"]),
    ],
}

# Minimal describe response for a related type
USER_DESCRIBE = {
    "name": "User",
    "label": "User",
    "fields": [
        _field("Id", "id", createable=False, updateable=False),
        _field("Name", "string"),
    ],
}
