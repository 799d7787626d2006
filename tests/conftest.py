"""
Pytest configuration and shared fixtures

Provides common test fixtures for domain models, activity logs and projects.
"""

from datetime import UTC, datetime, timedelta

import pytest

from pulse.domain.activity import ActivityRecord
from pulse.domain.checklist import Category, ChecklistItem, Phase
from pulse.domain.metrics import CitationSummary, EngineCitations, MetricsSnapshot, PromptSummary
from pulse.domain.project import AnalyzerResult, ProjectRecord

# ===== Time Fixtures =====


@pytest.fixture
def now():
    """Wednesday, 4 March 2026, noon UTC"""
    return datetime(2026, 3, 4, 12, 0, 0, tzinfo=UTC)


# ===== Activity Fixtures =====


@pytest.fixture
def make_activity(now):
    """Factory for activity records, timestamped relative to ``now``"""
    counter = {"n": 0}

    def _make(
        type_: str = "check",
        ago: timedelta = timedelta(minutes=5),
        author_uid: str | None = "u1",
        author_name: str | None = "Dana Reyes",
        **fields,
    ) -> ActivityRecord:
        counter["n"] += 1
        return ActivityRecord(
            id=f"a{counter['n']}",
            type=type_,
            timestamp=now - ago,
            author_uid=author_uid,
            author_name=author_name,
            fields=fields,
        )

    return _make


@pytest.fixture
def sample_log(make_activity):
    """Mixed activity log, newest first, two authors"""
    return [
        make_activity("check", timedelta(minutes=10), taskText="Add FAQ schema"),
        make_activity("analyze", timedelta(hours=2), author_uid="u2", author_name="Sam Ortiz", url="site.com"),
        make_activity("competitor_add", timedelta(hours=3), url="rival.com"),
        make_activity("check", timedelta(days=1, hours=1), author_uid="u2", author_name="Sam Ortiz"),
        make_activity("member_add", timedelta(days=1, hours=2), memberName="lee@example.com"),
        make_activity("export", timedelta(days=3), author_uid="u2", author_name="Sam Ortiz"),
    ]


# ===== Checklist Fixtures =====


@pytest.fixture
def phases():
    """Two phases with ten checklist items in total"""
    return (
        Phase(
            id="phase-1",
            number=1,
            title="Foundation",
            categories=(
                Category(id="c1", name="Basics", items=tuple(ChecklistItem(id=f"p1-{i}") for i in range(4))),
                Category(id="c2", name="Schema", items=tuple(ChecklistItem(id=f"p1s-{i}") for i in range(2))),
            ),
        ),
        Phase(
            id="phase-2",
            number=2,
            title="Content",
            categories=(Category(id="c3", name="Writing", items=tuple(ChecklistItem(id=f"p2-{i}") for i in range(4))),),
        ),
    )


@pytest.fixture
def all_checked(phases):
    return {item_id: True for phase in phases for item_id in phase.item_ids}


# ===== Metrics Fixtures =====


@pytest.fixture
def make_snapshot(now):
    """Factory for metrics snapshots"""

    def _make(score: float = 50, days_ago: float = 0, engines: dict[str, int] | None = None, prompts: int = 0):
        by_engine = tuple(EngineCitations(engine=name, citations=count) for name, count in (engines or {}).items())
        return MetricsSnapshot(
            timestamp=now - timedelta(days=days_ago),
            overall_score=score,
            citations=CitationSummary(total=sum((engines or {}).values()), by_engine=by_engine),
            prompts=PromptSummary(total=prompts),
        )

    return _make


@pytest.fixture
def scenario_project(make_snapshot, all_checked):
    """All ten items done, one snapshot at 80, analyzer at 60, only metrics used"""
    return ProjectRecord(
        id="proj-1",
        checked=all_checked,
        metrics_history=(make_snapshot(score=80),),
        analyzer_result=AnalyzerResult(overall_score=60),
    )
