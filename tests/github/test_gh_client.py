"""
Tests for the GitHub request layer and token resolution.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from shirokuma_docs.github.client import (
    GitHubAuthError,
    GitHubClient,
    GitHubError,
    get_client,
    resolve_token,
)


def _response(status: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    return response


def test_resolve_token_prefers_gh_token(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "gh-token")
    monkeypatch.setenv("GITHUB_TOKEN", "github-token")
    assert resolve_token() == "gh-token"


def test_resolve_token_github_token(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", " github-token ")
    assert resolve_token() == "github-token"


def test_resolve_token_from_gh_hosts_file(tmp_path, monkeypatch):
    gh_dir = tmp_path / "ghconf"
    gh_dir.mkdir()
    (gh_dir / "hosts.yml").write_text("github.com:\n  oauth_token: from-file\n  user: me\n")
    monkeypatch.setenv("GH_CONFIG_DIR", str(gh_dir))
    assert resolve_token() == "from-file"


def test_resolve_token_missing():
    with pytest.raises(GitHubAuthError, match="GitHub token not found"):
        resolve_token()


def test_rest_returns_json():
    client = GitHubClient("t", api_url="https://ghe.example.com/api/v3/")
    with patch.object(client.session, "request", return_value=_response(payload={"ok": True})) as request:
        assert client.rest("GET", "/repos/o/r", params={"page": 1}) == {"ok": True}

    args, kwargs = request.call_args
    assert args == ("GET", "https://ghe.example.com/api/v3/repos/o/r")
    assert kwargs["params"] == {"page": 1}
    assert kwargs["timeout"] == 30
    assert client.session.headers["Authorization"] == "Bearer t"


def test_rest_no_content():
    client = GitHubClient("t")
    with patch.object(client.session, "request", return_value=_response(status=204)):
        assert client.rest("DELETE", "x") is None


def test_rest_http_error_carries_status():
    client = GitHubClient("t")
    response = _response(status=404, payload={})
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    with patch.object(client.session, "request", return_value=response):
        with pytest.raises(GitHubError, match="GitHub API error 404: GET repos/o/r") as exc:
            client.rest("GET", "repos/o/r")
    assert exc.value.status == 404


def test_rest_connection_error():
    client = GitHubClient("t")
    with patch.object(client.session, "request", side_effect=requests.ConnectionError("down")):
        with pytest.raises(GitHubError, match="GitHub request failed"):
            client.rest("GET", "x")


def test_graphql_drops_none_variables():
    client = GitHubClient("t")
    with patch.object(client, "rest", return_value={"data": {"viewer": {}}}) as rest:
        result = client.graphql("query { viewer { login } }", {"a": 1, "cursor": None})

    assert result.data == {"viewer": {}}
    assert rest.call_args.kwargs["json"]["variables"] == {"a": 1}


def test_graphql_errors_without_data_raise():
    client = GitHubClient("t")
    payload = {"errors": [{"message": "bad field"}, {"message": "worse"}]}
    with patch.object(client, "rest", return_value=payload):
        with pytest.raises(GitHubError, match="GraphQL error: bad field; worse"):
            client.graphql("query")


def test_graphql_partial_errors_are_kept():
    client = GitHubClient("t")
    payload = {"data": {"x": 1}, "errors": [{"message": "partial"}]}
    with patch.object(client, "rest", return_value=payload):
        result = client.graphql("query")
    assert result.data == {"x": 1}
    assert result.errors == [{"message": "partial"}]


def test_graphql_rejects_query_variable():
    with pytest.raises(ValueError, match="reserved"):
        GitHubClient("t").graphql("query", {"query": "x"})


def test_get_client_uses_env(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "abc")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    client = get_client()
    assert client.api_url == "https://ghe.example.com/api/v3"
    assert client.session.headers["Authorization"] == "Bearer abc"
