# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while turning scanned schemas into an XRD."""

# ###############
# Public Interface
# ###############


class GeneratorError(Exception):
    """Base class for every error that aborts XRD generation."""


class SchemaNotFoundError(GeneratorError):
    """Raised when an explicitly requested schema is not in the file.

    Attributes:
        name: The requested schema name.
        available: Names of the schemas that were found.
    """

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"schema '{name}' not found in file. Available schemas: {', '.join(available)}")
        self.name = name
        self.available = available


class AmbiguousRootError(GeneratorError):
    """Raised when more than one schema is marked with ``@xrd``."""

    def __init__(self, names: list[str]) -> None:
        quoted = " and ".join(f"'{n}'" for n in names)
        super().__init__(f"multiple schemas marked with @xrd annotation: {quoted}. Only one schema should be marked.")
        self.names = names


class MissingGroupError(GeneratorError):
    """Raised when no API group is given by options, config or file metadata."""

    def __init__(self) -> None:
        super().__init__(
            "API group must be specified either via --group flag, the config file, "
            "or the '__xrd_group' variable in the KCL file"
        )


class CyclicSchemaReferenceError(GeneratorError):
    """Raised when inline expansion of schema references would never terminate.

    Attributes:
        cycle: Schema names along the reference path, ending with the repeated name.
    """

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"cyclic schema reference: {' -> '.join(cycle)}")
        self.cycle = cycle
