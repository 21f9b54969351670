"""Shared fixtures for all tests."""

import hashlib
import os
import re
import threading

import httpx
import pytest

from pin_actions.github import GitHubClient


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures/workflows")
FAKE_API_URL = "https://api.github.test"


def fake_sha(seed: str) -> str:
    """A deterministic 40-char hex SHA for test data."""
    return hashlib.sha1(seed.encode()).hexdigest()


# ---------------------------------------------------------------------------
# Fake GitHub API served through httpx.MockTransport
# ---------------------------------------------------------------------------

class FakeRepo:
    def __init__(self, latest_release=None):
        self.latest_release = latest_release
        self.tags = []          # [(name, commit_sha)], newest first
        self.refs = {}          # tag name -> (object type, sha)
        self.tag_objects = {}   # annotated tag object sha -> (object type, sha)

    def add_tag(self, name, commit, annotated=False):
        self.tags.append((name, commit))
        if annotated:
            obj_sha = fake_sha(f"tag-object:{name}")
            self.refs[name] = ("tag", obj_sha)
            self.tag_objects[obj_sha] = ("commit", commit)
        else:
            self.refs[name] = ("commit", commit)
        return self


class FakeGitHub:
    """Serves releases, tags, refs and tag objects for registered repos."""

    def __init__(self, page_size=100):
        self.repos = {}
        self.errors = {}     # path -> HTTP status to fail with
        self.requests = []   # paths, in the order they were received
        self.page_size = page_size
        self._lock = threading.Lock()

    def repo(self, full_name, latest_release=None):
        self.repos[full_name] = FakeRepo(latest_release=latest_release)
        return self.repos[full_name]

    def count(self, pattern):
        with self._lock:
            return sum(1 for p in self.requests if re.search(pattern, p))

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        with self._lock:
            self.requests.append(path)

        if path in self.errors:
            return httpx.Response(self.errors[path], json={"message": "boom"})

        m = re.match(r"^/repos/([^/]+)/([^/]+)/(.+)$", path)
        if not m or f"{m.group(1)}/{m.group(2)}" not in self.repos:
            return httpx.Response(404, json={"message": "Not Found"})
        repo = self.repos[f"{m.group(1)}/{m.group(2)}"]
        rest = m.group(3)

        if rest == "releases/latest":
            if repo.latest_release is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"tag_name": repo.latest_release})

        if rest == "tags":
            page = int(request.url.params.get("page", "1"))
            start = (page - 1) * self.page_size
            chunk = repo.tags[start:start + self.page_size]
            headers = {}
            if start + self.page_size < len(repo.tags):
                next_url = f"{FAKE_API_URL}{path}?per_page={self.page_size}&page={page + 1}"
                headers["Link"] = f'<{next_url}>; rel="next"'
            body = [{"name": name, "commit": {"sha": sha}} for name, sha in chunk]
            return httpx.Response(200, json=body, headers=headers)

        if rest.startswith("git/ref/tags/"):
            name = rest[len("git/ref/tags/"):]
            if name not in repo.refs:
                return httpx.Response(404, json={"message": "Not Found"})
            obj_type, sha = repo.refs[name]
            return httpx.Response(200, json={
                "ref": f"refs/tags/{name}",
                "object": {"type": obj_type, "sha": sha},
            })

        if rest.startswith("git/tags/"):
            sha = rest[len("git/tags/"):]
            if sha not in repo.tag_objects:
                return httpx.Response(404, json={"message": "Not Found"})
            obj_type, target = repo.tag_objects[sha]
            return httpx.Response(200, json={"object": {"type": obj_type, "sha": target}})

        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def github_client(fake_github):
    client = GitHubClient(
        token="test-token",
        base_url=FAKE_API_URL,
        transport=httpx.MockTransport(fake_github.handler),
    )
    yield client
    client.close()


# ---------------------------------------------------------------------------
# Workflow fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def read_fixture():
    """Read a workflow fixture by file name, preserving line endings."""
    def _read(name):
        with open(os.path.join(FIXTURES_DIR, name), "r", encoding="utf-8", newline="") as f:
            return f.read()
    return _read
