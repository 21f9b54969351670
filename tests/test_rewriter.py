"""Tests for the rewrite engine."""

from pin_actions.parser import extract_occurrences
from pin_actions.resolver import Policy, Resolution, resolve_all
from pin_actions.rewriter import (
    Replacement,
    apply_replacements,
    plan_replacements,
    update_content,
)


SHA_CHECKOUT = "8ade135a41bc03ea155e62e844d188df1ea18608"
SHA_SETUP_GO = "93397bea11091df50f3d7e59dc26a7711a8bcfbe"
SHA_CACHE = "ab5e6d0c87105b4c9c2047343972218f562e4319"


def _ok(owner, repo, version, sha):
    return Resolution(owner=owner, repo=repo, version=version, commit_id=sha)


def _failed(owner, repo):
    return Resolution(owner=owner, repo=repo, failure="not resolved")


# ---------------------------------------------------------------------------
# update_content
# ---------------------------------------------------------------------------

class TestUpdateContent:
    def test_full_workflow(self, read_fixture):
        content = read_fixture("ci.yml")
        occs = extract_occurrences(content)
        resolutions = [
            _ok("actions", "checkout", "v4.1.0", SHA_CHECKOUT),
            _ok("actions", "setup-go", "v5.0.1", SHA_SETUP_GO),
            _ok("actions", "cache", "v4.0.2", SHA_CACHE),
            _failed("docker", "setup-buildx-action"),
            _failed("actions", "upload-artifact"),
        ]
        expected = (
            "name: Test Workflow\n"
            "on:\n"
            "  push:\n"
            "    branches: [ main ]\n"
            "\n"
            "jobs:\n"
            "  test:\n"
            "    runs-on: ubuntu-latest\n"
            "    steps:\n"
            f"      - uses: actions/checkout@{SHA_CHECKOUT} # v4.1.0\n"
            f"      - uses: actions/setup-go@{SHA_SETUP_GO} # v5.0.1\n"
            "      - name: Run tests\n"
            f"        uses: actions/cache@{SHA_CACHE} # v4.0.2\n"
            "      - uses: docker/setup-buildx-action@v2 # some comment\n"
            "        with:\n"
            "          driver: docker-container\n"
            "      - uses: actions/upload-artifact@v4.0.0\n"
        )
        assert update_content(content, occs, resolutions) == expected

    def test_unrelated_lines_untouched(self, read_fixture):
        content = read_fixture("ci.yml")
        occs = extract_occurrences(content)
        resolutions = [
            _ok("actions", "checkout", "v4.1.0", SHA_CHECKOUT),
            _failed("actions", "setup-go"),
            _ok("actions", "cache", "v4.0.2", SHA_CACHE),
            _failed("docker", "setup-buildx-action"),
            _failed("actions", "upload-artifact"),
        ]
        updated = update_content(content, occs, resolutions)
        before = content.splitlines()
        after = updated.splitlines()
        assert len(before) == len(after)
        changed = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
        assert changed == [9, 12]
        assert "      - uses: docker/setup-buildx-action@v2 # some comment" in after

    def test_already_pinned_is_identity(self, read_fixture):
        content = read_fixture("pinned.yml")
        occs = extract_occurrences(content)
        resolutions = [_ok("actions", "checkout", "v4.1.0", SHA_CHECKOUT)]
        assert plan_replacements(occs, resolutions) == []
        assert update_content(content, occs, resolutions) is content

    def test_no_successful_resolutions_returns_original(self, read_fixture):
        content = read_fixture("inline_comments.yml")
        occs = extract_occurrences(content)
        resolutions = [_failed(o.owner, o.repo) for o in occs]
        assert update_content(content, occs, resolutions) is content

    def test_stale_comment_replaced(self):
        content = "uses: actions/checkout@v3 # v3.6.0 old note\n"
        occs = extract_occurrences(content)
        updated = update_content(content, occs, [_ok("actions", "checkout", "v4.1.0", SHA_CHECKOUT)])
        assert updated == f"uses: actions/checkout@{SHA_CHECKOUT} # v4.1.0\n"

    def test_crlf_preserved(self):
        content = "- uses: actions/checkout@v4 # old\r\n- run: make\r\n"
        occs = extract_occurrences(content)
        updated = update_content(content, occs, [_ok("actions", "checkout", "v4.1.0", SHA_CHECKOUT)])
        assert updated == f"- uses: actions/checkout@{SHA_CHECKOUT} # v4.1.0\r\n- run: make\r\n"


# ---------------------------------------------------------------------------
# apply_replacements
# ---------------------------------------------------------------------------

class TestApplyReplacements:
    def test_unsorted_input_applied_in_order(self):
        content = "aaa bbb ccc"
        repls = [Replacement(8, 11, "C"), Replacement(0, 3, "A")]
        assert apply_replacements(content, repls) == "A bbb C"

    def test_overlapping_replacement_skipped(self):
        content = "0123456789"
        repls = [Replacement(2, 6, "X"), Replacement(4, 8, "Y")]
        assert apply_replacements(content, repls) == "01X6789"

    def test_no_replacements_returns_same_object(self):
        content = "unchanged"
        assert apply_replacements(content, []) is content


# ---------------------------------------------------------------------------
# Idempotence end to end
# ---------------------------------------------------------------------------

class TestIdempotence:
    def test_second_pass_is_noop(self, fake_github, github_client, read_fixture):
        fake_github.repo("actions/checkout").add_tag("v4", SHA_CHECKOUT)
        fake_github.repo("github/super-linter").add_tag("v6.0.0", SHA_SETUP_GO)
        fake_github.repo("github/codeql-action").add_tag("v3", SHA_CACHE, annotated=True)
        content = read_fixture("multiple.yml")

        def run(text):
            occs = extract_occurrences(text)
            return update_content(text, occs, resolve_all(github_client, occs, Policy.REQUESTED))

        once = run(content)
        assert once != content
        assert run(once) == once

    def test_same_major_second_pass_stays_in_major(self, fake_github, github_client):
        repo = fake_github.repo("actions/checkout", latest_release="v3.0.0")
        repo.add_tag("v3.0.0", SHA_CACHE).add_tag("v2.5.0", SHA_SETUP_GO).add_tag("v2.1.0", SHA_CHECKOUT)
        content = "uses: actions/checkout@v2\n"

        def run(text):
            occs = extract_occurrences(text)
            return update_content(text, occs, resolve_all(github_client, occs, Policy.SAME_MAJOR))

        once = run(content)
        assert once == f"uses: actions/checkout@{SHA_SETUP_GO} # v2.5.0\n"
        assert run(once) == once

    def test_expand_major_writes_commit_not_tag(self, fake_github, github_client):
        repo = fake_github.repo("actions/checkout")
        repo.add_tag("v4", SHA_CHECKOUT).add_tag("v4.1.0", SHA_CHECKOUT)
        content = "uses: actions/checkout@v4\n"
        occs = extract_occurrences(content)
        resolutions = resolve_all(github_client, occs, Policy.REQUESTED, expand_major=True)
        assert update_content(content, occs, resolutions) == (
            f"uses: actions/checkout@{SHA_CHECKOUT} # v4.1.0\n"
        )
