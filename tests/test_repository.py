"""Tests for GraphRepository against real pygit2 repositories."""

import pygit2
import pytest

from lanegraph.git_backend.repository import GraphRepository, _format_time


def signature(when: int, offset: int = 0) -> pygit2.Signature:
    return pygit2.Signature("Ada Lovelace", "ada@example.com", when, offset)


@pytest.fixture
def history_repo(tmp_path):
    """
    main:    c1 -- c2 -- m
                \\       /
    feature:     f1 ----

    c1 is tagged v1.
    """
    repo = pygit2.init_repository(str(tmp_path), initial_head="main")
    tree = repo.TreeBuilder().write()

    c1 = repo.create_commit("HEAD", signature(1000), signature(1000), "first\n\nwith a body", tree, [])
    c2 = repo.create_commit("HEAD", signature(2000), signature(2000), "second", tree, [c1])
    repo.branches.local.create("feature", repo[c1])
    f1 = repo.create_commit(
        "refs/heads/feature", signature(3000, 120), signature(3000, 120), "feature work", tree, [c1]
    )
    m = repo.create_commit("HEAD", signature(4000), signature(4000), "merge feature", tree, [c2, f1])
    repo.references.create("refs/tags/v1", c1)

    ids = {"c1": str(c1), "c2": str(c2), "f1": str(f1), "m": str(m)}
    return GraphRepository(str(tmp_path)), ids


class TestOpen:
    def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(ValueError):
            GraphRepository(str(plain))

    def test_empty_repository(self, tmp_path):
        """An unborn HEAD yields no commits rather than an error."""
        pygit2.init_repository(str(tmp_path), initial_head="main")
        repo = GraphRepository(str(tmp_path))
        assert repo.load_graph(100) == []
        assert repo.get_checked_out_branch() is None

    def test_checked_out_branch(self, history_repo):
        repo, _ = history_repo
        assert repo.get_checked_out_branch() == "main"

    def test_list_branches(self, history_repo):
        repo, _ = history_repo
        assert repo.list_branches() == ["feature", "main"]


class TestLoadGraph:
    def test_all_branches(self, history_repo):
        """Newest first, parents before children never."""
        repo, ids = history_repo
        records = repo.load_graph(100)
        hashes = [r.hash for r in records]

        assert set(hashes) == set(ids.values())
        assert hashes[0] == ids["m"]
        assert hashes[-1] == ids["c1"]
        position = {h: i for i, h in enumerate(hashes)}
        for record in records:
            for parent in record.parents:
                assert position[parent] > position[record.hash]

    def test_record_fields(self, history_repo):
        repo, ids = history_repo
        records = {r.hash: r for r in repo.load_graph(100)}

        merge = records[ids["m"]]
        assert merge.parents == (ids["c2"], ids["f1"])
        assert merge.is_merge
        assert merge.author_name == "Ada Lovelace"

        root = records[ids["c1"]]
        assert root.is_root
        assert root.message == "first"
        assert root.timestamp == "1970-01-01T00:16:40+00:00"
        assert records[ids["f1"]].timestamp.endswith("+02:00")

    def test_decorations(self, history_repo):
        """Refs read like `git log --format=%D`."""
        repo, ids = history_repo
        records = {r.hash: r for r in repo.load_graph(100)}
        assert records[ids["m"]].refs == ("HEAD -> main",)
        assert records[ids["f1"]].refs == ("feature",)
        assert records[ids["c1"]].refs == ("tag: v1",)
        assert records[ids["c2"]].refs == ()

    def test_limit(self, history_repo):
        repo, ids = history_repo
        records = repo.load_graph(2)
        assert len(records) == 2
        assert records[0].hash == ids["m"]
        assert repo.load_graph(0) == []

    def test_head_only(self, history_repo):
        """Without all_branches only HEAD's ancestry is walked."""
        repo, ids = history_repo
        repo.create_branch("side", ids["c2"])
        hashes = {r.hash for r in repo.load_graph(100, all_branches=False)}
        assert hashes == set(ids.values())

    def test_first_parent(self, history_repo):
        """First-parent mode skips the merged branch and trims merge parents."""
        repo, ids = history_repo
        records = repo.load_graph(100, all_branches=False, first_parent=True)
        assert [r.hash for r in records] == [ids["m"], ids["c2"], ids["c1"]]
        assert records[0].parents == (ids["c2"],)

    def test_single_branch(self, history_repo):
        repo, ids = history_repo
        records = repo.load_graph(100, branch="feature")
        assert [r.hash for r in records] == [ids["f1"], ids["c1"]]

    def test_walk_uses_its_own_handle(self, history_repo, monkeypatch):
        """Each load opens a separate repository so a worker thread never shares the UI's."""
        repo, _ = history_repo
        real_repository = pygit2.Repository
        opened = []

        def tracking_repository(*args, **kwargs):
            handle = real_repository(*args, **kwargs)
            opened.append(handle)
            return handle

        monkeypatch.setattr(pygit2, "Repository", tracking_repository)
        repo.load_graph(100)
        repo.load_graph(100, first_parent=True)

        assert len(opened) == 2
        assert all(handle is not repo.repo for handle in opened)

    def test_walk_sees_refs_created_meanwhile(self, history_repo):
        repo, ids = history_repo
        repo.load_graph(100)
        repo.create_tag("later", ids["c2"])
        records = {r.hash: r for r in repo.load_graph(100)}
        assert records[ids["c2"]].refs == ("tag: later",)

    def test_unknown_branch(self, history_repo):
        repo, _ = history_repo
        with pytest.raises(ValueError, match="Unknown branch"):
            repo.load_graph(100, branch="nope")


class TestActions:
    def test_create_branch(self, history_repo):
        repo, ids = history_repo
        repo.create_branch("hotfix", ids["c2"])
        assert "hotfix" in repo.list_branches()
        records = {r.hash: r for r in repo.load_graph(100)}
        assert "hotfix" in records[ids["c2"]].refs

    def test_create_branch_twice(self, history_repo):
        repo, ids = history_repo
        with pytest.raises(ValueError, match="already exists"):
            repo.create_branch("feature", ids["c2"])

    def test_create_tag(self, history_repo):
        repo, ids = history_repo
        repo.create_tag("v2", ids["m"])
        records = {r.hash: r for r in repo.load_graph(100)}
        assert "tag: v2" in records[ids["m"]].refs
        with pytest.raises(ValueError):
            repo.create_tag("v1", ids["m"])

    def test_unknown_commit(self, history_repo):
        repo, _ = history_repo
        with pytest.raises(ValueError, match="Unknown commit"):
            repo.create_branch("x", "deadbeef")


class TestFormatTime:
    def test_utc(self):
        assert _format_time(0, 0) == "1970-01-01T00:00:00+00:00"

    def test_negative_offset(self):
        assert _format_time(0, -300) == "1969-12-31T19:00:00-05:00"
