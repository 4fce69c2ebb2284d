from __future__ import annotations

import base64

from extrel.core.config import BitbucketConfig
from extrel.core.result import Err, Ok
from extrel.platform.http import HttpError, HttpResponse, MockHttpClient
from extrel.release.adapters import PullRequestAdapter
from extrel.release.bitbucket import (
    BitbucketClient,
    parse_created,
    pull_request_payload,
    resolve_auth_header,
)
from extrel.release.model import CreatedPullRequest, PullRequestSpec
from extrel.release.version import SemanticVersion

URL = "https://api.bitbucket.org/2.0/repositories/acme/extension/pullrequests"

CONFIG = BitbucketConfig(workspace="acme", repo_slug="extension", access_token="secret")


def _spec() -> PullRequestSpec:
    return PullRequestSpec.merge_back(SemanticVersion(1, 3, 0), trunk="main")


class TestAuth:
    def test_token_wins(self) -> None:
        config = BitbucketConfig(access_token="t", username="u", app_password="p")
        assert resolve_auth_header(config) == Ok("Bearer t")

    def test_basic_auth(self) -> None:
        expected = base64.b64encode(b"deploy:app-pass").decode()
        config = BitbucketConfig(username="deploy", app_password="app-pass")
        assert resolve_auth_header(config) == Ok(f"Basic {expected}")

    def test_none_configured(self) -> None:
        result = resolve_auth_header(BitbucketConfig(username="deploy"))
        assert isinstance(result, Err)
        assert result.error.kind == "missing_config"


def test_payload_shape() -> None:
    payload = pull_request_payload(_spec())

    assert payload["title"] == "Release v1.3.0"
    assert payload["source"] == {"branch": {"name": "release/v1.3.0"}}
    assert payload["destination"] == {"branch": {"name": "main"}}
    assert payload["close_source_branch"] is False
    description = payload["description"]
    assert isinstance(description, str)
    assert description.startswith("Automated release for version 1.3.0\n")
    assert "merges the release branch back into main" in description


class TestParseCreated:
    def test_full_body(self) -> None:
        body = '{"id": 12, "links": {"html": {"href": "https://bitbucket.org/acme/x/pr/12"}}}'
        assert parse_created(body) == CreatedPullRequest(
            id=12, url="https://bitbucket.org/acme/x/pr/12"
        )

    def test_unparseable_body(self) -> None:
        assert parse_created("<html>") == CreatedPullRequest(id=None, url=None)
        assert parse_created("[]") == CreatedPullRequest(id=None, url=None)

    def test_partial_body(self) -> None:
        assert parse_created('{"id": 3}') == CreatedPullRequest(id=3, url=None)


class TestBitbucketClient:
    def test_from_config_requires_workspace(self) -> None:
        result = BitbucketClient.from_config(
            BitbucketConfig(repo_slug="x", access_token="t"), MockHttpClient()
        )
        assert isinstance(result, Err)
        assert result.error.message == "BITBUCKET_WORKSPACE environment variable not set"

    def test_from_config_requires_auth(self) -> None:
        result = BitbucketClient.from_config(
            BitbucketConfig(workspace="acme", repo_slug="x"), MockHttpClient()
        )
        assert isinstance(result, Err)
        assert "authentication" in result.error.message

    def test_is_pull_request_adapter(self) -> None:
        client = BitbucketClient(config=CONFIG, http=MockHttpClient())
        assert isinstance(client, PullRequestAdapter)
        assert client.pull_requests_url == URL

    def test_created(self) -> None:
        http = MockHttpClient()
        http.set_response(URL, HttpResponse(201, '{"id": 5, "links": {"html": {"href": "u"}}}'))
        client = BitbucketClient(config=CONFIG, http=http)

        result = client.create_pull_request(_spec())

        assert result == Ok(CreatedPullRequest(id=5, url="u"))
        url, payload, headers = http.calls[0]
        assert url == URL
        assert payload == pull_request_payload(_spec())
        assert headers == {"Authorization": "Bearer secret"}

    def test_non_201_is_api_failure(self) -> None:
        http = MockHttpClient()
        http.set_response(URL, HttpResponse(400, '{"error": {"message": "bad branch"}}\n'))

        result = BitbucketClient(config=CONFIG, http=http).create_pull_request(_spec())

        assert isinstance(result, Err)
        assert result.error.kind == "api_failed"
        assert result.error.message == "failed to create pull request: HTTP 400"
        assert result.error.hint == '{"error": {"message": "bad branch"}}'

    def test_network_failure(self) -> None:
        http = MockHttpClient()
        http.set_response(URL, HttpError(URL, "connection refused"))

        result = BitbucketClient(config=CONFIG, http=http).create_pull_request(_spec())

        assert isinstance(result, Err)
        assert result.error.kind == "api_failed"
        assert result.error.hint is not None and "connection refused" in result.error.hint
