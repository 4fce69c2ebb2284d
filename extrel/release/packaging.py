"""Signed ``.crx`` packaging via the ``crx3`` CLI."""

from __future__ import annotations

import base64
import binascii
import shutil
from pathlib import Path

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Ok, Result
from extrel.output.console import ConsoleProtocol, Style
from extrel.platform.process import run as run_process
from extrel.release.errors import ReleaseError

CRX3_TIMEOUT_SECONDS = 5 * 60.0


def decode_private_key(encoded: str) -> Result[bytes, ReleaseError]:
    try:
        return Ok(base64.b64decode(encoded, validate=False))
    except (binascii.Error, ValueError) as e:
        return Err(
            ReleaseError(
                kind="missing_config",
                message=f"EXTENSION_PRIVATE_KEY is not valid base64: {e}",
            )
        )


def _remove_key(path: Path, console: ConsoleProtocol) -> None:
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError as e:
        console.warning(f"could not remove {path.name}: {e}")


def package_extension(
    config: ReleaseConfig, console: ConsoleProtocol
) -> Result[Path, ReleaseError]:
    """Pack ``dist_dir`` into ``crx_filename`` signed with the configured key.

    The decoded key only exists on disk for the duration of the ``crx3``
    call and is removed even when packing fails.
    """
    encoded = config.extension.private_key_b64
    if not encoded:
        return Err(
            ReleaseError(
                kind="missing_config",
                message="EXTENSION_PRIVATE_KEY environment variable not set",
            )
        )

    key = decode_private_key(encoded)
    if isinstance(key, Err):
        return key

    if shutil.which("crx3") is None:
        return Err(
            ReleaseError(
                kind="packaging_failed",
                message="crx3: missing",
                hint="npm install -g crx3",
            )
        )

    key_path = config.path(config.paths.private_key)
    output = config.path(config.paths.crx_filename)
    cmd = [
        "crx3",
        "pack",
        f"{config.paths.dist_dir}/",
        "-p",
        config.paths.private_key,
        "-o",
        config.paths.crx_filename,
    ]

    try:
        try:
            key_path.write_bytes(key.value)
        except OSError as e:
            return Err(
                ReleaseError(kind="io_failed", message=f"failed to write {key_path.name}: {e}")
            )

        console.print(" ".join(cmd), Style.DIM)
        result = run_process(cmd, cwd=config.root, timeout=CRX3_TIMEOUT_SECONDS, tool="crx3")
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="packaging_failed",
                    message=str(result.error),
                    hint=result.error.detail() or None,
                )
            )
    finally:
        _remove_key(key_path, console)

    console.success(f"Extension packaged successfully as {output.name}")
    return Ok(output)
