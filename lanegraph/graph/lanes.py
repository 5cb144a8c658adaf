"""
Lane assignment for the commit graph.

Commits arrive newest first. Each lane is reserved for the next commit the
branch thread is waiting for; when that commit shows up it inherits the lane.
Fresh lanes always take the lowest free index, so lane numbers stay compact
and stable instead of growing with history length.
"""

from collections.abc import Iterator, Sequence

from lanegraph.graph.types import CommitRecord, LaneAssignment


class LaneTable:
    """Active lanes for one assignment pass: lane index <-> expected hash."""

    def __init__(self) -> None:
        self._lane_of: dict[str, int] = {}
        self._expected: dict[int, str] = {}

    @property
    def active(self) -> dict[int, str]:
        """Snapshot of reserved lanes mapped to the hash each one waits for."""
        return dict(self._expected)

    def expects(self, commit_hash: str) -> bool:
        return commit_hash in self._lane_of

    def resolve(self, commit_hash: str) -> int | None:
        """Release and return the lane waiting for commit_hash, if any."""
        lane = self._lane_of.pop(commit_hash, None)
        if lane is not None:
            self._expected.pop(lane, None)
        return lane

    def lowest_free(self) -> int:
        lane = 0
        while lane in self._expected:
            lane += 1
        return lane

    def reserve(self, lane: int, commit_hash: str) -> None:
        self._expected[lane] = commit_hash
        self._lane_of[commit_hash] = lane

    def __len__(self) -> int:
        return len(self._expected)


def walk_lanes(commits: Sequence[CommitRecord]) -> Iterator[tuple[CommitRecord, LaneAssignment, LaneTable]]:
    """
    Assign lanes row by row.

    Yields (commit, assignment, table) after each commit's parents have been
    reserved. The table is live and mutated by the next step; copy
    `table.active` if you need to keep it.
    """
    table = LaneTable()
    max_lane = 0

    for commit in commits:
        lane = table.resolve(commit.hash)
        if lane is None:
            lane = table.lowest_free()
        max_lane = max(max_lane, lane)

        for i, parent in enumerate(commit.parents):
            # Already awaited by another thread: the branches have converged
            if table.expects(parent):
                continue
            parent_lane = lane if i == 0 else table.lowest_free()
            table.reserve(parent_lane, parent)
            max_lane = max(max_lane, parent_lane)

        yield commit, LaneAssignment(lane=lane, max_lane=max_lane), table


def assign_lanes(commits: Sequence[CommitRecord]) -> dict[str, LaneAssignment]:
    """
    Assign a lane to every commit.

    Deterministic for a given list and order. Parents missing from the list
    keep their lane reserved to the end; duplicate hashes overwrite earlier
    entries rather than raising.
    """
    return {commit.hash: assignment for commit, assignment, _ in walk_lanes(commits)}


def max_lane_of(assignments: dict[str, LaneAssignment]) -> int:
    """Widest lane used anywhere in the assignment (0 when empty)."""
    return max((a.max_lane for a in assignments.values()), default=0)
