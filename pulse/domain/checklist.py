"""
Checklist domain models

The static phase definition tree (Phase -> Category -> Item) and the
completion statistics derived from a project's checklist state.

A checklist state is a plain ``dict[str, bool]`` of item id to done flag.
Ids that do not exist in the phase tree are ignored, not errors.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    text: str = ""


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    items: tuple[ChecklistItem, ...] = ()


@dataclass(frozen=True)
class Phase:
    """
    One phase of the optimization checklist.

    Attributes:
        id: Stable phase id (e.g. "phase-1")
        number: Display order, starting at 1
        title: Phase title
        categories: Item groups within the phase
    """

    id: str
    number: int
    title: str
    categories: tuple[Category, ...] = ()

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(item.id for category in self.categories for item in category.items)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Phase":
        """Build a phase from its static configuration document."""
        categories = tuple(
            Category(
                id=str(cat.get("id", "")),
                name=str(cat.get("name", "")),
                items=tuple(
                    ChecklistItem(id=str(item["id"]), text=str(item.get("text", "")))
                    for item in cat.get("items", [])
                ),
            )
            for cat in raw.get("categories", [])
        )
        return cls(
            id=str(raw.get("id", "")),
            number=int(raw.get("number", 0)),
            title=str(raw.get("title", "")),
            categories=categories,
        )


def parse_phases(raw_phases: Iterable[Mapping[str, Any]]) -> tuple[Phase, ...]:
    return tuple(Phase.from_dict(raw) for raw in raw_phases)


@dataclass(frozen=True)
class ChecklistStats:
    """
    Checklist completion summary.

    Attributes:
        total: Items defined in the phase tree
        done: Defined items marked done
        pct: Rounded completion percentage, 0-100
    """

    total: int
    done: int
    pct: int

    @property
    def remaining(self) -> int:
        return self.total - self.done

    @property
    def fraction(self) -> float:
        """Exact completion ratio in [0, 1]."""
        return self.done / self.total if self.total > 0 else 0.0


@dataclass(frozen=True)
class PhaseProgress:
    phase_id: str
    short_name: str
    title: str
    total: int
    done: int
    progress: int


def _round_pct(done: int, total: int) -> int:
    if total <= 0:
        return 0
    # Half-up, matching how the dashboard has always displayed percentages
    return math.floor(done * 100 / total + 0.5)


def checklist_stats(phases: Sequence[Phase], checked: Mapping[str, bool]) -> ChecklistStats:
    """
    Count defined items and how many of them are done.

    Only ids present in the phase tree are counted, so ``done`` never exceeds
    ``total`` and ``pct == 100`` exactly when every defined item is done.
    """
    item_ids = [item_id for phase in phases for item_id in phase.item_ids]
    total = len(item_ids)
    done = sum(1 for item_id in item_ids if checked.get(item_id))
    pct = _round_pct(done, total)
    if pct == 100 and done < total:
        # 199 of 200 must not read as complete
        pct = 99
    return ChecklistStats(total=total, done=done, pct=pct)


def phase_progress(phases: Sequence[Phase], checked: Mapping[str, bool]) -> list[PhaseProgress]:
    """Per-phase completion, in phase order."""
    result = []
    for phase in phases:
        ids = phase.item_ids
        done = sum(1 for item_id in ids if checked.get(item_id))
        result.append(
            PhaseProgress(
                phase_id=phase.id,
                short_name=f"P{phase.number}",
                title=phase.title,
                total=len(ids),
                done=done,
                progress=_round_pct(done, len(ids)),
            )
        )
    return result
