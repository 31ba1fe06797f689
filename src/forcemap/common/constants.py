# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants shared across forcemap.
"""

# Identity field carried by every record type
ID_FIELD = "Id"

# Key under which the service tags each row with its record type
ROW_ATTRIBUTES_KEY = "attributes"

# Row tag of aggregate query results; never materialized
AGGREGATE_RESULT_TYPE = "AggregateResult"

# Field type tags reported by the describe call
FIELD_TYPE_BOOLEAN = "boolean"
FIELD_TYPE_CURRENCY = "currency"
FIELD_TYPE_PERCENT = "percent"
FIELD_TYPE_DOUBLE = "double"
FIELD_TYPE_NUMBER = "number"
FIELD_TYPE_INT = "int"
FIELD_TYPE_DATE = "date"
FIELD_TYPE_DATETIME = "datetime"
FIELD_TYPE_PICKLIST = "picklist"
FIELD_TYPE_REFERENCE = "reference"
FIELD_TYPE_STRING = "string"
FIELD_TYPE_ID = "id"

FLOAT_FIELD_TYPES = frozenset({FIELD_TYPE_CURRENCY, FIELD_TYPE_PERCENT, FIELD_TYPE_DOUBLE, FIELD_TYPE_NUMBER})

# OpenTelemetry semantic convention attribute names
OTEL_ATTR_DB_SYSTEM = "db.system"
OTEL_ATTR_DB_OPERATION = "db.operation"
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_SOBJECT_TYPE = "forcemap.sobject_type"
OTEL_ATTR_REQUEST_ID = "forcemap.client_request_id"
