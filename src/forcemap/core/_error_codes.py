# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_409 = "http_409"
HTTP_412 = "http_412"
HTTP_415 = "http_415"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

ALL_HTTP_SUBCODES = {
    HTTP_400,
    HTTP_401,
    HTTP_403,
    HTTP_404,
    HTTP_409,
    HTTP_412,
    HTTP_415,
    HTTP_429,
    HTTP_500,
    HTTP_502,
    HTTP_503,
    HTTP_504,
}

TRANSIENT_STATUS = {429, 502, 503, 504}

# Validation subcodes
VALIDATION_UNKNOWN_FIELD = "validation_unknown_field"
VALIDATION_NO_SUCH_METHOD = "validation_no_such_method"
VALIDATION_MISSING_ID = "validation_missing_id"

# Metadata subcodes
METADATA_DUPLICATE_FIELD = "metadata_duplicate_field"
METADATA_NOT_MATERIALIZED = "metadata_not_materialized"
METADATA_UNKNOWN_TYPE = "metadata_unknown_type"


def http_subcode(status: int) -> str:
    """Map an HTTP status to its ``http_<status>`` subcode."""
    return f"http_{status}"


def is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUS
