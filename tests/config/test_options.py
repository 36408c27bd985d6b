# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for conversion options and config file loading."""

from pathlib import Path

import pytest

from kcl2xrd.config.options import CONFIG_FILE_NAME, ConfigError, XRDOptions, find_config, load_config
from kcl2xrd.model.schema import PrinterColumn

# ###############
# Test Helpers
# ###############


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text(content, encoding="utf-8")
    return path


# ###############
# Loading
# ###############


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            """\
group: platform.example.org
version: v1beta1
kind: XNetwork
schema: Network
with-claims: true
claim-kind: Net
claim-plural: nets
served: true
referenceable: false
categories: [crossplane, network]
status-preserve-unknown: true
printer-columns:
  - "Ready:string:.status.ready:Whether it is ready"
  - name: Age
    type: date
    jsonPath: .metadata.creationTimestamp
""",
        )
        options = load_config(path)
        assert options.group == "platform.example.org"
        assert options.version == "v1beta1"
        assert options.kind == "XNetwork"
        assert options.schema_name == "Network"
        assert options.with_claims is True
        assert options.claim_kind == "Net"
        assert options.claim_plural == "nets"
        assert options.served is True
        assert options.referenceable is False
        assert options.categories == ["crossplane", "network"]
        assert options.status_preserve_unknown is True
        assert options.printer_columns == [
            PrinterColumn(name="Ready", type="string", json_path=".status.ready", description="Whether it is ready"),
            PrinterColumn(name="Age", type="date", json_path=".metadata.creationTimestamp"),
        ]

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_config(_write(tmp_path, "")) == XRDOptions()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "group: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path, "- a\n- b\n"))

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config(_write(tmp_path, "grup: example.org\n"))

    def test_wrong_type(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, "categories: 5\n"))

    def test_invalid_printer_column(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="printer column"):
            load_config(_write(tmp_path, 'printer-columns: ["Ready:string"]\n'))


class TestFindConfig:
    def test_found(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "group: example.org\n")
        assert find_config(tmp_path) == path

    def test_absent(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None


# ###############
# Merging
# ###############


class TestMergedOver:
    def test_set_values_win(self) -> None:
        base = XRDOptions(group="file.example.org", version="v1", served=False)
        merged = XRDOptions(group="cli.example.org").merged_over(base)
        assert merged.group == "cli.example.org"
        assert merged.version == "v1"
        assert merged.served is False

    def test_false_overrides(self) -> None:
        merged = XRDOptions(served=False).merged_over(XRDOptions(served=True))
        assert merged.served is False

    def test_python_names_and_aliases(self) -> None:
        assert XRDOptions(with_claims=True) == XRDOptions.model_validate({"with-claims": True})
