"""Version fields in JSON manifests (``package.json``, extension manifest)."""

from __future__ import annotations

import json
from pathlib import Path

from extrel.core.result import Err, Ok, Result
from extrel.core.structured import StrDict, as_str_dict, get_str
from extrel.release.errors import ReleaseError
from extrel.release.version import SemanticVersion


def parse_manifest_text(text: str, *, source: str) -> Result[StrDict, ReleaseError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind="io_failed", message=f"invalid JSON in {source}: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ReleaseError(kind="io_failed", message=f"{source} is not a JSON object"))
    return Ok(data)


def version_field(data: StrDict, *, source: str) -> Result[str, ReleaseError]:
    version = get_str(data, "version")
    if version is None:
        return Err(
            ReleaseError(kind="missing_file", message=f"could not read version from {source}")
        )
    return Ok(version)


def _load(path: Path) -> Result[StrDict, ReleaseError]:
    if not path.is_file():
        return Err(
            ReleaseError(kind="missing_file", message=f"{path.name} not found", hint=str(path))
        )
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to read {path.name}: {e}"))
    return parse_manifest_text(text, source=path.name)


def read_manifest_version(path: Path) -> Result[str, ReleaseError]:
    """Raw ``version`` string of the manifest at ``path`` (not validated)."""
    data = _load(path)
    if isinstance(data, Err):
        return data
    return version_field(data.value, source=path.name)


def write_manifest_version(
    path: Path, version: SemanticVersion
) -> Result[str | None, ReleaseError]:
    """Set ``version`` in place, keeping key order and 2-space formatting.

    Returns the previous version string (None if the field was absent).
    """
    data = _load(path)
    if isinstance(data, Err):
        return data

    manifest = data.value
    previous = get_str(manifest, "version")
    manifest["version"] = str(version)
    try:
        path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to write {path.name}: {e}"))
    return Ok(previous)


def write_version_env(path: Path, version: SemanticVersion) -> Result[Path, ReleaseError]:
    """Export the version for later pipeline steps (``source version.env``)."""
    try:
        path.write_text(f"export VERSION={version}\n", encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to write {path}: {e}"))
    return Ok(path)
