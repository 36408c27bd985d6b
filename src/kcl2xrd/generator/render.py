# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML rendering of generated XRDs."""

from pathlib import Path

import yaml

from kcl2xrd.model.document import CompositeResourceDefinition

# ###############
# Public Interface
# ###############


def render_yaml(xrd: CompositeResourceDefinition) -> str:
    """Render *xrd* as YAML, keeping the model's key order."""
    return yaml.safe_dump(xrd.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)


def write_xrd(xrd: CompositeResourceDefinition, path: Path) -> None:
    """Write the rendered XRD to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_yaml(xrd), encoding="utf-8")
