from pathlib import Path

from _pytest.monkeypatch import MonkeyPatch
import pytest

from shirokuma_docs.github.client import GraphQLResult


@pytest.fixture(scope="session", autouse=True)
def _session_env(tmp_path_factory: pytest.TempPathFactory) -> None:
    """
    Session-level hermetic env that does not depend on the function-scoped
    `monkeypatch` fixture (avoids ScopeMismatch).
    """
    home = tmp_path_factory.mktemp("home")
    mp = MonkeyPatch()
    mp.setenv("HOME", str(home))
    try:
        yield
    finally:
        mp.undo()


@pytest.fixture(autouse=True)
def hermetic_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Autouse: each test runs in its own tmp cwd, XDG dirs stay inside tmp,
    and no real GitHub token leaks in.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / ".cache"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    for var in ("GH_TOKEN", "GITHUB_TOKEN", "GH_CONFIG_DIR", "GITHUB_API_URL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def write_files(tmp_path: Path):
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _write(files: dict[str, str], root: Path | None = None) -> Path:
        base = root or tmp_path
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return base

    return _write


class FakeGitHubClient:
    """Canned GraphQL/REST responses keyed by query text or (method, path).

    A queued response that is an exception instance is raised instead of
    returned. The last queued response repeats.
    """

    def __init__(self):
        self.graphql_responses: dict[str, list] = {}
        self.rest_responses: dict[tuple[str, str], list] = {}
        self.calls: list[tuple[str, dict]] = []
        self.rest_calls: list[tuple[str, str, dict | None, dict | None]] = []

    def on_graphql(self, query: str, *responses) -> "FakeGitHubClient":
        self.graphql_responses.setdefault(query, []).extend(responses)
        return self

    def on_rest(self, method: str, path: str, *responses) -> "FakeGitHubClient":
        self.rest_responses.setdefault((method, path), []).extend(responses)
        return self

    @staticmethod
    def _next(queue: list):
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def graphql(self, query, variables=None):
        self.calls.append((query, dict(variables or {})))
        queue = self.graphql_responses.get(query)
        if not queue:
            raise AssertionError(f"Unexpected GraphQL query:\n{query}")
        return GraphQLResult(data=self._next(queue))

    def rest(self, method, path, params=None, json=None):
        self.rest_calls.append((method, path, params, json))
        queue = self.rest_responses.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected REST call: {method} {path}")
        return self._next(queue)

    def variables_for(self, query: str) -> list[dict]:
        return [variables for q, variables in self.calls if q == query]


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()
