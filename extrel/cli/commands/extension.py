from __future__ import annotations

from extrel.cli.commands._helpers import unwrap_or_exit
from extrel.cli.context import build_context
from extrel.release.packaging import package_extension
from extrel.release.update_xml import generate_update_xml


def update_xml() -> None:
    """Write update.xml for the version in package.json."""
    ctx = build_context()
    unwrap_or_exit(generate_update_xml(ctx.config, ctx.console), ctx)


def package() -> None:
    """Pack the built extension into a signed .crx with crx3."""
    ctx = build_context()
    out = unwrap_or_exit(package_extension(ctx.config, ctx.console), ctx)
    ctx.console.success(str(out))
