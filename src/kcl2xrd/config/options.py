# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion options and the optional ``.kcl2xrd.yaml`` configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kcl2xrd.model.schema import PrinterColumn
from kcl2xrd.parser.annotations import parse_printer_column

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".kcl2xrd.yaml"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class XRDOptions(BaseModel):
    """Caller-supplied conversion settings.

    Every value is optional; ``None`` means "not given", so that values from
    the KCL file metadata (or built-in defaults) apply instead. In a config
    file the keys are spelled in kebab-case (``with-claims``).
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    group: str | None = None
    version: str | None = None
    kind: str | None = None
    schema_name: str | None = Field(default=None, alias="schema")
    with_claims: bool | None = Field(default=None, alias="with-claims")
    claim_kind: str | None = Field(default=None, alias="claim-kind")
    claim_plural: str | None = Field(default=None, alias="claim-plural")
    served: bool | None = None
    referenceable: bool | None = None
    categories: list[str] | None = None
    printer_columns: list[PrinterColumn] | None = Field(default=None, alias="printer-columns")
    status_preserve_unknown: bool | None = Field(default=None, alias="status-preserve-unknown")

    @field_validator("printer_columns", mode="before")
    @classmethod
    def _parse_column_strings(cls, value: Any) -> Any:
        """Accept ``"name:type:jsonPath[:description]"`` strings next to mappings."""
        if not isinstance(value, list):
            return value
        columns: list[Any] = []
        for entry in value:
            if isinstance(entry, str):
                column = parse_printer_column(entry)
                if column is None:
                    raise ValueError(f"invalid printer column {entry!r}, expected name:type:jsonPath[:description]")
                columns.append(column)
            else:
                columns.append(entry)
        return columns

    def merged_over(self, base: XRDOptions) -> XRDOptions:
        """Return *base* with every value set on ``self`` taking precedence."""
        update = {key: getattr(self, key) for key in type(self).model_fields if getattr(self, key) is not None}
        return base.model_copy(update=update)


def load_config(path: Path) -> XRDOptions:
    """Load conversion options from a YAML configuration file.

    An empty file yields empty options.

    Args:
        path: Path to the configuration file.

    Returns:
        The validated XRDOptions.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or contains
            unknown keys or values of the wrong type.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config must be a YAML mapping")

    try:
        return XRDOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file '{path}': {exc}") from exc


def find_config(directory: Path) -> Path | None:
    """Return the config file in *directory*, or None if there is none."""
    candidate = directory / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None
