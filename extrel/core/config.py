"""Typed configuration loading.

Configuration is assembled once per invocation from three layers, later ones
winning:

1. Built-in defaults.
2. ``extrel.toml`` at the repository root (optional).
3. The pipeline environment (``TYPE``, ``VERSION``, ``BITBUCKET_*``, ...).

The resulting ``ReleaseConfig`` is frozen and passed explicitly to release
flows; nothing below the CLI layer reads ``os.environ``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "BitbucketConfig",
    "ConfigError",
    "ExtensionConfig",
    "PathsConfig",
    "PullRequestEventConfig",
    "ReleaseConfig",
    "load_config",
]

CONFIG_FILENAME = "extrel.toml"

DEFAULT_TRUNK_BRANCH = "main"
DEFAULT_REMOTE = "origin"
DEFAULT_API_URL = "https://api.bitbucket.org/2.0"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Artifact paths, relative to the repository root."""

    package_json: str = "package.json"
    extension_manifest: str = "src/manifest.json"
    dist_dir: str = "dist"
    crx_filename: str = "extension.crx"
    update_xml: str = "update.xml"
    version_env: str = "version.env"
    private_key: str = "key.pem"


@dataclass(frozen=True, slots=True)
class BitbucketConfig:
    """Repository identifiers and credentials for the pull request API.

    Either ``access_token`` or ``username`` + ``app_password`` must be set
    for PR creation; the token wins when both are present.
    """

    api_url: str = DEFAULT_API_URL
    workspace: str | None = None
    repo_slug: str | None = None
    access_token: str | None = None
    username: str | None = None
    app_password: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestEventConfig:
    """Metadata of the pull request whose merge triggered the pipeline."""

    pr_id: str | None = None
    destination_branch: str | None = None
    source_branch: str | None = None


@dataclass(frozen=True, slots=True)
class ExtensionConfig:
    crx_base_url: str | None = None
    extension_id: str | None = None
    private_key_b64: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything a release flow needs to know about its environment."""

    root: Path
    trunk_branch: str = DEFAULT_TRUNK_BRANCH
    remote: str = DEFAULT_REMOTE
    increment: str | None = None
    version: str | None = None
    clone_dir: Path | None = None
    paths: PathsConfig = field(default_factory=PathsConfig)
    bitbucket: BitbucketConfig = field(default_factory=BitbucketConfig)
    pr_event: PullRequestEventConfig = field(default_factory=PullRequestEventConfig)
    extension: ExtensionConfig = field(default_factory=ExtensionConfig)

    def path(self, relative: str) -> Path:
        """Resolve a configured relative path against the repository root."""
        return self.root / relative

    @property
    def version_env_path(self) -> Path:
        base = self.clone_dir if self.clone_dir is not None else self.root
        return base / self.paths.version_env

    @classmethod
    def from_dict(cls, root: Path, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from parsed ``extrel.toml`` data."""
        release: StrDict = get_table(data, "release") or {}
        bitbucket: StrDict = get_table(data, "bitbucket") or {}
        defaults = PathsConfig()

        return cls(
            root=root,
            trunk_branch=get_str(release, "trunk_branch") or DEFAULT_TRUNK_BRANCH,
            remote=get_str(release, "remote") or DEFAULT_REMOTE,
            paths=PathsConfig(
                package_json=get_str(release, "package_json") or defaults.package_json,
                extension_manifest=get_str(release, "extension_manifest")
                or defaults.extension_manifest,
                dist_dir=get_str(release, "dist_dir") or defaults.dist_dir,
                crx_filename=get_str(release, "crx_filename") or defaults.crx_filename,
                update_xml=get_str(release, "update_xml") or defaults.update_xml,
                version_env=get_str(release, "version_env") or defaults.version_env,
                private_key=get_str(release, "private_key") or defaults.private_key,
            ),
            bitbucket=BitbucketConfig(
                api_url=get_str(bitbucket, "api_url") or DEFAULT_API_URL,
            ),
        )

    def with_env(self, env: Mapping[str, str]) -> ReleaseConfig:
        """Overlay pipeline environment variables onto this config."""

        def var(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        clone_dir = var("BITBUCKET_CLONE_DIR")
        return replace(
            self,
            trunk_branch=var("EXTREL_TRUNK_BRANCH") or self.trunk_branch,
            increment=var("TYPE") or self.increment,
            version=var("VERSION") or self.version,
            clone_dir=Path(clone_dir) if clone_dir else self.clone_dir,
            bitbucket=replace(
                self.bitbucket,
                workspace=var("BITBUCKET_WORKSPACE") or self.bitbucket.workspace,
                repo_slug=var("BITBUCKET_REPO_SLUG") or self.bitbucket.repo_slug,
                access_token=var("BITBUCKET_ACCESS_TOKEN") or self.bitbucket.access_token,
                username=var("BITBUCKET_USERNAME") or self.bitbucket.username,
                app_password=var("BITBUCKET_APP_PASSWORD") or self.bitbucket.app_password,
            ),
            pr_event=PullRequestEventConfig(
                pr_id=var("BITBUCKET_PR_ID"),
                destination_branch=var("BITBUCKET_PR_DESTINATION_BRANCH"),
                source_branch=var("BITBUCKET_PR_SOURCE_BRANCH"),
            ),
            extension=ExtensionConfig(
                crx_base_url=var("CRX_BASE_URL"),
                extension_id=var("EXTENSION_ID"),
                private_key_b64=var("EXTENSION_PRIVATE_KEY"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(root: Path, env: Mapping[str, str]) -> Result[ReleaseConfig, ConfigError]:
    """Build the release config for the repository at ``root``.

    Args:
        root: Repository root (where ``package.json`` lives).
        env: Environment mapping, usually ``os.environ``.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) if ``extrel.toml``
        exists but cannot be parsed.
    """
    path = root / CONFIG_FILENAME
    if not path.exists():
        return Ok(ReleaseConfig(root=root).with_env(env))

    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed
    return Ok(ReleaseConfig.from_dict(root, parsed.value).with_env(env))
