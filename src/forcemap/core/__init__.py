# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for forcemap.

This module contains the foundational components including authentication,
configuration, HTTP client, telemetry, and error handling.
"""

__all__ = []
