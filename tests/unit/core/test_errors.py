# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest

from forcemap.core._error_codes import (
    HTTP_404,
    METADATA_NOT_MATERIALIZED,
    VALIDATION_NO_SUCH_METHOD,
    VALIDATION_UNKNOWN_FIELD,
    http_subcode,
    is_transient_status,
)
from forcemap.core.errors import (
    ForceError,
    HttpError,
    MetadataError,
    NoSuchMethodError,
    NotMaterializedError,
    UnknownFieldError,
    ValidationError,
)


class TestErrors(unittest.TestCase):
    def test_unknown_field_error(self):
        err = UnknownFieldError("Nope", "Account")
        self.assertIsInstance(err, ValidationError)
        self.assertIsInstance(err, ValueError)
        self.assertEqual(err.subcode, VALIDATION_UNKNOWN_FIELD)
        self.assertEqual(err.details, {"field": "Nope", "sobject_type": "Account"})
        self.assertIn("Nope", str(err))

    def test_no_such_method_error_is_attribute_error(self):
        err = NoSuchMethodError("frobnicate", "Account")
        self.assertIsInstance(err, AttributeError)
        self.assertEqual(err.subcode, VALIDATION_NO_SUCH_METHOD)
        self.assertEqual(str(err), "No such method: Account.frobnicate")

    def test_not_materialized_error(self):
        err = NotMaterializedError("Account")
        self.assertIsInstance(err, MetadataError)
        self.assertEqual(err.subcode, METADATA_NOT_MATERIALIZED)
        self.assertEqual(err.code, "metadata_error")

    def test_http_error_to_dict(self):
        err = HttpError(
            "HTTP 404: gone",
            status_code=404,
            subcode=HTTP_404,
            service_error_code="NOT_FOUND",
            fields=["Id"],
            request_id="req-1",
        )
        data = err.to_dict()
        self.assertEqual(data["code"], "http_error")
        self.assertEqual(data["source"], "server")
        self.assertEqual(data["status_code"], 404)
        self.assertEqual(data["details"]["service_error_code"], "NOT_FOUND")
        self.assertEqual(data["details"]["fields"], ["Id"])
        self.assertFalse(data["is_transient"])
        self.assertIn("timestamp", data)

    def test_all_errors_share_a_base(self):
        for err in (ValidationError("x"), MetadataError("x"), HttpError("x", status_code=500)):
            self.assertIsInstance(err, ForceError)

    def test_subcode_helpers(self):
        self.assertEqual(http_subcode(404), HTTP_404)
        self.assertTrue(is_transient_status(429))
        self.assertFalse(is_transient_status(400))


if __name__ == "__main__":
    unittest.main()
