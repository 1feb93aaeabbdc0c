"""In-memory roster types used by the formation engine.

Candidates live in a `Pool` (an arena addressed by index). Groups hold pool
indices, never Candidate objects, so stages can hand rosters to each other by
copying small index lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple


LEADER = "Leader"
BALANCED = "Balanced"
THINKER = "Thinker"
UNKNOWN = "Unknown"

CATEGORIES = (LEADER, THINKER, BALANCED, UNKNOWN)


def classify_personality(score: Optional[int]) -> str:
    """Map a personality score (0-100) to its category label."""
    if score is None:
        return UNKNOWN
    if 90 <= score <= 100:
        return LEADER
    if 70 <= score <= 89:
        return BALANCED
    if 50 <= score <= 69:
        return THINKER
    return UNKNOWN


@dataclass(frozen=True)
class Candidate:
    """A surveyed participant as seen by the engine (read-only)."""

    candidate_id: str
    name: str
    skill_level: int
    personality_score: Optional[int]
    preferred_game: str
    preferred_role: str
    email: str = ""

    @property
    def category(self) -> str:
        return classify_personality(self.personality_score)

    def __str__(self) -> str:
        return (
            f"{self.name} ({self.candidate_id}) - {self.preferred_game} - Skill: {self.skill_level} "
            f"- Role: {self.preferred_role} - {self.category} ({self.personality_score})"
        )


class Pool:
    """Immutable arena of candidates addressed by position."""

    def __init__(self, candidates: Iterable[Candidate]):
        self._candidates: Tuple[Candidate, ...] = tuple(candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def __getitem__(self, index: int) -> Candidate:
        return self._candidates[index]

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)

    def indices(self) -> range:
        return range(len(self._candidates))

    def candidates(self, indices: Iterable[int]) -> List[Candidate]:
        return [self._candidates[i] for i in indices]


@dataclass
class Group:
    """A team under construction: a bounded, duplicate-free list of pool indices."""

    group_id: str
    capacity: int
    members: List[int] = field(default_factory=list)
    mean_skill: float = 0.0

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    def add(self, index: int, pool: Pool) -> bool:
        """Add a member; returns False when the group is full or already holds it."""
        if self.is_full or index in self.members:
            return False
        self.members.append(index)
        self.refresh(pool)
        return True

    def replace(self, out_index: int, in_index: int, pool: Pool) -> None:
        """Swap one member for another in place, keeping member order."""
        position = self.members.index(out_index)
        self.members[position] = in_index
        self.refresh(pool)

    def refresh(self, pool: Pool) -> None:
        """Recompute the cached mean skill from current membership."""
        if not self.members:
            self.mean_skill = 0.0
            return
        self.mean_skill = sum(pool[i].skill_level for i in self.members) / len(self.members)

    def copy(self) -> "Group":
        return Group(self.group_id, self.capacity, list(self.members), self.mean_skill)

    def __str__(self) -> str:
        return f"Team {self.group_id}: {self.size} members, Avg Skill: {self.mean_skill:.2f}"


def create_empty_groups(group_count: int, capacity: int) -> List[Group]:
    return [Group(f"Team-{i + 1}", capacity) for i in range(group_count)]


@dataclass(frozen=True)
class Assignment:
    """Result of a formation run: the pool plus the teams drawn from it."""

    pool: Pool
    team_size: int
    groups: Tuple[Group, ...]

    @property
    def placed(self) -> List[int]:
        return [i for group in self.groups for i in group.members]

    @property
    def unplaced(self) -> List[int]:
        placed = set(self.placed)
        return [i for i in self.pool.indices() if i not in placed]

    def members(self, group: Group) -> List[Candidate]:
        return self.pool.candidates(group.members)

    def copy(self) -> "Assignment":
        """Copy with independent group membership lists (candidates are shared)."""
        return Assignment(self.pool, self.team_size, tuple(g.copy() for g in self.groups))


def as_pool(candidates: Sequence[Candidate] | Pool) -> Pool:
    return candidates if isinstance(candidates, Pool) else Pool(candidates)
