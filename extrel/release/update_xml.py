"""Update-check manifest for self-hosted Chrome extensions.

The consuming updater is sensitive to the exact document shape, so it is
rendered from a fixed template rather than through an XML serializer (which
would reorder attributes and switch to double quotes).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import quoteattr

from extrel.core.config import ReleaseConfig
from extrel.core.result import Err, Ok, Result
from extrel.output.console import ConsoleProtocol
from extrel.release.errors import ReleaseError
from extrel.release.manifest import read_manifest_version
from extrel.release.version import parse_version

_TEMPLATE = """<?xml version='1.0' encoding='UTF-8'?>
<gupdate xmlns='http://www.google.com/update2/response' protocol='2.0'>
  <app appid='{extension_id}'>
    <updatecheck codebase='{crx_url}' version='{version}' />
  </app>
</gupdate>
"""


@dataclass(frozen=True, slots=True)
class UpdateManifest:
    extension_id: str
    version: str
    crx_url: str

    def render(self) -> str:
        return _TEMPLATE.format(
            extension_id=_attr(self.extension_id),
            crx_url=_attr(self.crx_url),
            version=_attr(self.version),
        )


def _attr(value: str) -> str:
    # quoteattr picks the quote style; we always use single quotes.
    quoted = quoteattr(value, {"'": "&apos;"})
    return quoted[1:-1]


def _missing(name: str) -> ReleaseError:
    return ReleaseError(kind="missing_config", message=f"{name} environment variable not set")


def crx_url(base_url: str, crx_filename: str) -> str:
    return f"{base_url.rstrip('/')}/{crx_filename}"


def generate_update_xml(
    config: ReleaseConfig, console: ConsoleProtocol
) -> Result[Path, ReleaseError]:
    """Write the update manifest for the version in ``package.json``."""
    console.header("Generating Chrome update manifest")

    base_url = config.extension.crx_base_url
    extension_id = config.extension.extension_id
    if not base_url:
        return Err(_missing("CRX_BASE_URL"))
    if not extension_id:
        return Err(_missing("EXTENSION_ID"))

    version_text = read_manifest_version(config.path(config.paths.package_json))
    if isinstance(version_text, Err):
        return version_text
    version = parse_version(version_text.value)
    if isinstance(version, Err):
        return version

    manifest = UpdateManifest(
        extension_id=extension_id,
        version=str(version.value),
        crx_url=crx_url(base_url, config.paths.crx_filename),
    )
    console.print(f"Extension ID: {manifest.extension_id}")
    console.print(f"Version: {manifest.version}")
    console.print(f"CRX URL: {manifest.crx_url}")

    out = config.path(config.paths.update_xml)
    try:
        out.write_text(manifest.render(), encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to write {out}: {e}"))

    console.success(f"Update manifest written to {out}")
    return Ok(out)
