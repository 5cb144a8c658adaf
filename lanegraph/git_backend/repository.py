"""
Git repository access using pygit2 - feeds the commit graph.
"""

import logging
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pygit2
from pygit2.enums import SortMode

from lanegraph.graph.types import CommitRecord

logger = logging.getLogger(__name__)


class GraphRepository:
    """Reads commit history and refs for the graph view"""

    def __init__(self, repo_path: str | None = None) -> None:
        """Initialize repository"""
        if repo_path is None:
            repo_path = str(Path.cwd())

        found = pygit2.discover_repository(repo_path)
        if found is None:
            raise ValueError(f"Not in a git repository: {repo_path}")

        self.repo = pygit2.Repository(found)

    @property
    def path(self) -> str:
        """Working directory (or git dir for bare repositories)"""
        return self.repo.workdir or self.repo.path

    def get_checked_out_branch(self) -> str | None:
        """Name of the checked-out branch, None when detached or unborn"""
        return _checked_out_branch(self.repo)

    def list_branches(self) -> list[str]:
        """Local branches first, then remote-tracking branches, each sorted"""
        local = sorted(self.repo.branches.local)
        remote = sorted(
            name for name in self.repo.branches.remote if not name.endswith("/HEAD")
        )
        return local + remote

    def _collect_decorations(self, repo: pygit2.Repository) -> dict[str, list[str]]:
        """Map commit hash -> ref labels, in `git log %D` style"""
        labels: dict[str, list[str]] = {}

        def add(oid: pygit2.Oid, label: str) -> None:
            labels.setdefault(str(oid), []).append(label)

        current = _checked_out_branch(repo)
        if not repo.head_is_unborn:
            head_oid = repo.head.peel(pygit2.Commit).id
            add(head_oid, f"HEAD -> {current}" if current else "HEAD")

        for name in sorted(repo.branches.local):
            if name == current:
                continue
            add(repo.branches.local[name].peel(pygit2.Commit).id, name)

        for name in sorted(repo.branches.remote):
            if name.endswith("/HEAD"):
                continue
            add(repo.branches.remote[name].peel(pygit2.Commit).id, name)

        for ref_name in sorted(repo.references):
            if not ref_name.startswith("refs/tags/"):
                continue
            try:
                target = repo.references[ref_name].peel(pygit2.Commit)
            except (ValueError, pygit2.GitError):
                # Tags pointing at trees or blobs have no place in the graph
                continue
            add(target.id, f"tag: {ref_name[len('refs/tags/') :]}")

        return labels

    def _walk_tips(
        self, repo: pygit2.Repository, all_branches: bool, branch: str | None
    ) -> list[pygit2.Oid]:
        """Commits the history walk starts from"""
        if branch is not None:
            found = repo.branches.get(branch)
            if found is None:
                raise ValueError(f"Unknown branch: {branch}")
            return [found.peel(pygit2.Commit).id]

        tips: list[pygit2.Oid] = []
        if not repo.head_is_unborn:
            tips.append(repo.head.peel(pygit2.Commit).id)

        if all_branches:
            for ref_name in sorted(repo.references):
                if not ref_name.startswith(("refs/heads/", "refs/remotes/", "refs/tags/")):
                    continue
                try:
                    commit = repo.references[ref_name].peel(pygit2.Commit)
                except (ValueError, pygit2.GitError):
                    continue
                if commit.id not in tips:
                    tips.append(commit.id)

        return tips

    def load_graph(
        self,
        limit: int,
        all_branches: bool = True,
        first_parent: bool = False,
        branch: str | None = None,
    ) -> list[CommitRecord]:
        """
        Load up to `limit` commits, newest first, in topological order.

        Args:
            limit: Maximum number of commits
            all_branches: Walk every branch and tag instead of HEAD only
            first_parent: Follow only first parents; merge records then list
                only their first parent, like `git log --first-parent`
            branch: Walk a single branch (overrides all_branches)

        Raises:
            ValueError: if `branch` does not exist
        """
        if limit <= 0:
            return []

        # Own handle per call: libgit2 repositories must not be shared across threads
        repo = pygit2.Repository(self.repo.path)
        tips = self._walk_tips(repo, all_branches, branch)
        if not tips:
            return []

        walker = repo.walk(tips[0], SortMode.TOPOLOGICAL | SortMode.TIME)
        for tip in tips[1:]:
            walker.push(tip)
        if first_parent:
            walker.simplify_first_parent()

        decorations = self._collect_decorations(repo)
        records: list[CommitRecord] = []

        for commit in walker:
            parents = [str(oid) for oid in commit.parent_ids]
            if first_parent:
                parents = parents[:1]
            oid = str(commit.id)
            records.append(
                CommitRecord(
                    hash=oid,
                    parents=tuple(parents),
                    refs=tuple(decorations.get(oid, [])),
                    author_name=commit.author.name,
                    timestamp=_format_time(commit.author.time, commit.author.offset),
                    message=commit.message.strip().split("\n")[0],
                )
            )
            if len(records) >= limit:
                break

        logger.debug("Loaded %d commits from %s", len(records), self.path)
        return records

    def _get_commit(self, commit_hash: str) -> pygit2.Commit:
        try:
            obj = self.repo.revparse_single(commit_hash)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown commit: {commit_hash}") from e
        commit = obj.peel(pygit2.Commit)
        assert isinstance(commit, pygit2.Commit)
        return commit

    def create_branch(self, branch_name: str, commit_hash: str) -> None:
        """Create a local branch pointing at a commit"""
        if branch_name in self.repo.branches.local:
            raise ValueError(f"Branch already exists: {branch_name}")
        self.repo.branches.local.create(branch_name, self._get_commit(commit_hash))

    def create_tag(self, tag_name: str, commit_hash: str) -> None:
        """Create a lightweight tag pointing at a commit"""
        ref_name = f"refs/tags/{tag_name}"
        if ref_name in self.repo.references:
            raise ValueError(f"Tag already exists: {tag_name}")
        self.repo.references.create(ref_name, self._get_commit(commit_hash).id)

    def cherry_pick(self, commit_hash: str) -> None:
        """Cherry-pick a commit onto the checked-out branch"""
        self._run_git("cherry-pick", self._get_commit(commit_hash).id)

    def revert(self, commit_hash: str) -> None:
        """Revert a commit on the checked-out branch"""
        self._run_git("revert", "--no-edit", self._get_commit(commit_hash).id)

    def _run_git(self, *args: object) -> None:
        """Run a git command in the work tree; failures become ValueError"""
        if self.repo.workdir is None:
            raise ValueError("Operation needs a work tree")
        cmd = ["git", *(str(arg) for arg in args)]
        result = subprocess.run(cmd, cwd=self.repo.workdir, capture_output=True, text=True)
        if result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip()
            raise ValueError(f"git {args[0]} failed: {message}")


def _format_time(seconds: int, offset_minutes: int) -> str:
    """ISO-8601 author date in the author's own timezone, as `%aI` prints it"""
    tz = timezone(timedelta(minutes=offset_minutes))
    return datetime.fromtimestamp(seconds, tz=tz).isoformat()


def _checked_out_branch(repo: pygit2.Repository) -> str | None:
    if repo.head_is_unborn or repo.head_is_detached:
        return None
    return repo.head.shorthand
