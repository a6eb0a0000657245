"""Hatchling build hook that stamps the wheel with the git commit."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

BUILD_INFO_PATH = "librenote/_build_info.py"


class CustomBuildHook(BuildHookInterface):
    """Writes librenote/_build_info.py for ``librenote --version``."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        root = Path(self.root)
        commit = self._git(["rev-parse", "HEAD"], root)
        date = self._git(["show", "-s", "--format=%cI", "HEAD"], root)
        (root / BUILD_INFO_PATH).write_text(
            "# Generated by hatch_build.py\n"
            f"COMMIT = {commit!r}\n"
            f"DATE = {date!r}\n",
            encoding="utf-8",
        )
        build_data.setdefault("artifacts", []).append(BUILD_INFO_PATH)

    def _git(self, args: list[str], cwd: Path) -> str | None:
        try:
            out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
        except (subprocess.CalledProcessError, OSError):
            # Building from an sdist has no git checkout
            return None
        return out.decode().strip() or None
