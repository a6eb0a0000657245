"""Build identification for ``librenote --version``.

The commit and date come from, in order: the git checkout the package runs
from, the ``_build_info`` module written by the build hook, or the VCS
commit recorded by pip in ``direct_url.json``.
"""

from __future__ import annotations

import importlib.metadata
import json
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional


class BuildInfo(NamedTuple):
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode().strip() or None


def _from_git_repo() -> Optional[BuildInfo]:
    here = Path(__file__).resolve().parent
    if _run_git(["rev-parse", "--show-toplevel"], here) is None:
        return None
    status = _run_git(["status", "--porcelain"], here)
    return BuildInfo(
        commit=_run_git(["rev-parse", "HEAD"], here),
        date=_run_git(["show", "-s", "--format=%cI", "HEAD"], here),
        dirty=bool(status),
    )


def _from_embedded_file() -> Optional[BuildInfo]:
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    return BuildInfo(
        commit=getattr(_build_info, "COMMIT", None),
        date=getattr(_build_info, "DATE", None),
        dirty=False,
    )


def _from_direct_url() -> Optional[BuildInfo]:
    # PEP 610: installs from VCS record the commit id
    try:
        text = importlib.metadata.distribution("librenote").read_text("direct_url.json")
    except importlib.metadata.PackageNotFoundError:
        return None
    if not text:
        return None
    try:
        commit = (json.loads(text).get("vcs_info") or {}).get("commit_id")
    except (json.JSONDecodeError, AttributeError):
        return None
    return BuildInfo(commit=commit, date=None, dirty=False) if commit else None


def get_build_info() -> BuildInfo:
    for getter in (_from_git_repo, _from_embedded_file, _from_direct_url):
        info = getter()
        if info and (info.commit or info.date):
            return info
    return BuildInfo(commit=None, date=None, dirty=False)


def get_version_string() -> str:
    info = get_build_info()
    commit = info.commit[:7] if info.commit else "unknown"
    dirty_suffix = "-dirty" if info.dirty else ""
    return f"{commit}{dirty_suffix} {info.date or 'unknown'}"
