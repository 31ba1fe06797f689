# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import datetime as dt

import pandas as pd
import pytest

from forcemap.utils._pandas import dataframe_to_records, records_to_dataframe


class TestDataframeToRecords:
    def test_missing_values_are_omitted(self):
        df = pd.DataFrame([{"Name": "A", "City": None}])
        assert dataframe_to_records(df) == [{"Name": "A"}]

    def test_missing_values_as_null(self):
        df = pd.DataFrame([{"Name": "A", "City": None}])
        assert dataframe_to_records(df, na_as_null=True) == [{"Name": "A", "City": None}]

    def test_timestamps_become_datetimes(self):
        df = pd.DataFrame([{"DateTime_Field": pd.Timestamp("2010-04-01T12:00:00Z")}])
        value = dataframe_to_records(df)[0]["DateTime_Field"]
        assert type(value) is dt.datetime
        assert value == dt.datetime(2010, 4, 1, 12, 0, tzinfo=dt.timezone.utc)


class TestRecordsToDataframe:
    def test_dicts(self):
        df = records_to_dataframe([{"Name": "A"}, {"Name": "B"}])
        assert list(df["Name"]) == ["A", "B"]

    def test_unsupported_item(self):
        with pytest.raises(TypeError):
            records_to_dataframe([42])
