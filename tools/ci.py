#!/usr/bin/env python3
# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the kcl2xrd CI checks locally: format, lint, type check, tests and build.

Pass step names (``lint``, ``tests``, ...) to run a subset.
"""

import pathlib
import subprocess
import sys
import time

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: dict[str, tuple[str, list[str]]] = {
    "format": ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    "lint": ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    "types": ("Type check", ["uv", "run", "ty", "check", "src/"]),
    "tests": ("Tests", ["uv", "run", "pytest", "--cov=kcl2xrd", "--cov-report=term-missing"]),
    "build": ("Build", ["uv", "build"]),
}


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps (all by default) and print a summary."""
    selected = argv if argv is not None else sys.argv[1:]
    unknown = [name for name in selected if name not in STEPS]
    if unknown:
        print(chalk.red(f"Unknown step(s): {', '.join(unknown)}. Choose from: {', '.join(STEPS)}"))
        return 2

    results: list[tuple[str, bool, float]] = []
    for key in selected or list(STEPS):
        title, cmd = STEPS[key]
        _banner(title)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        results.append((title, proc.returncode == 0, time.monotonic() - start))

    _banner("  Summary")
    for title, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        status = "PASS" if passed else "FAIL"
        print(colour(f"  {status}  {title} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _repo_root() -> pathlib.Path:
    return pathlib.Path(__file__).resolve().parent.parent


if __name__ == "__main__":
    sys.exit(main())
