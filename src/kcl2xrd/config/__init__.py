# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion options for kcl2xrd."""

from kcl2xrd.config.options import (
    CONFIG_FILE_NAME,
    ConfigError,
    XRDOptions,
    find_config,
    load_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "XRDOptions",
    "find_config",
    "load_config",
]
