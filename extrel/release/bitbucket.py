"""Bitbucket Cloud pull request adapter."""

from __future__ import annotations

import base64
import json

from extrel.core.config import BitbucketConfig
from extrel.core.result import Err, Ok, Result
from extrel.core.structured import as_str_dict, get_int, get_path
from extrel.platform.http import HttpClient
from extrel.release.errors import ReleaseError
from extrel.release.model import CreatedPullRequest, PullRequestSpec

_CREATED = 201


def resolve_auth_header(config: BitbucketConfig) -> Result[str, ReleaseError]:
    """Bearer token if configured, else basic auth from username + app password."""
    if config.access_token:
        return Ok(f"Bearer {config.access_token}")
    if config.username and config.app_password:
        raw = f"{config.username}:{config.app_password}".encode("utf-8")
        return Ok(f"Basic {base64.b64encode(raw).decode('ascii')}")
    return Err(
        ReleaseError(
            kind="missing_config",
            message="Bitbucket authentication not configured",
            hint="set BITBUCKET_ACCESS_TOKEN, or BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD",
        )
    )


def pull_request_payload(spec: PullRequestSpec) -> dict[str, object]:
    return {
        "title": spec.title,
        "description": spec.description,
        "source": {"branch": {"name": spec.source_branch}},
        "destination": {"branch": {"name": spec.destination_branch}},
        "close_source_branch": spec.close_source_branch,
    }


def parse_created(body: str) -> CreatedPullRequest:
    """Extract id and web URL from a 201 body; missing fields become None."""
    try:
        obj: object = json.loads(body)
    except json.JSONDecodeError:
        return CreatedPullRequest(id=None, url=None)

    data = as_str_dict(obj)
    if data is None:
        return CreatedPullRequest(id=None, url=None)

    href = get_path(data, "links", "html", "href")
    return CreatedPullRequest(
        id=get_int(data, "id"),
        url=href if isinstance(href, str) else None,
    )


class BitbucketClient:
    """PullRequestAdapter for the Bitbucket Cloud REST API (2.0)."""

    def __init__(self, *, config: BitbucketConfig, http: HttpClient) -> None:
        self._config = config
        self._http = http

    @classmethod
    def from_config(
        cls, config: BitbucketConfig, http: HttpClient
    ) -> Result[BitbucketClient, ReleaseError]:
        """Validate identifiers and credentials before any request is made."""
        for value, name in (
            (config.workspace, "BITBUCKET_WORKSPACE"),
            (config.repo_slug, "BITBUCKET_REPO_SLUG"),
        ):
            if not value:
                return Err(
                    ReleaseError(
                        kind="missing_config",
                        message=f"{name} environment variable not set",
                    )
                )
        auth = resolve_auth_header(config)
        if isinstance(auth, Err):
            return auth
        return Ok(cls(config=config, http=http))

    @property
    def pull_requests_url(self) -> str:
        base = self._config.api_url.rstrip("/")
        return f"{base}/repositories/{self._config.workspace}/{self._config.repo_slug}/pullrequests"

    def create_pull_request(
        self, spec: PullRequestSpec
    ) -> Result[CreatedPullRequest, ReleaseError]:
        auth = resolve_auth_header(self._config)
        if isinstance(auth, Err):
            return auth

        url = self.pull_requests_url
        headers = {"Authorization": auth.value}
        result = self._http.post_json(url, pull_request_payload(spec), headers)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="api_failed",
                    message="pull request API unreachable",
                    hint=str(result.error),
                )
            )

        response = result.value
        if response.status != _CREATED:
            return Err(
                ReleaseError(
                    kind="api_failed",
                    message=f"failed to create pull request: HTTP {response.status}",
                    hint=response.body.strip() or None,
                )
            )
        return Ok(parse_created(response.body))
