"""
Tests for the project health scorer.
"""

from dataclasses import replace
from datetime import UTC, datetime

import pytest

from pulse.domain.health import HealthBreakdown, health_status
from pulse.domain.project import AnalyzerResult, FeatureUsageFacts, ProjectRecord
from pulse.ml.health_scorer import (
    HealthScorer,
    analyzer_component,
    checklist_component,
    compute_health_score,
    external_component,
    feature_component,
)


class TestComponents:
    def test_checklist_without_tree_is_skipped(self):
        assert checklist_component(None, {"a": True}) is None

    def test_checklist_with_empty_tree_scores_zero(self):
        assert checklist_component((), {}) == 0

    def test_checklist_fraction(self, phases):
        assert checklist_component(phases, {"p1-0": True, "p1-1": True}) == pytest.approx(5.0)

    def test_external_uses_latest_snapshot(self, make_snapshot):
        history = [make_snapshot(score=100, days_ago=7), make_snapshot(score=40)]
        assert external_component(history) == 10.0
        assert external_component([]) is None

    def test_analyzer_is_clamped(self):
        assert analyzer_component(AnalyzerResult(overall_score=140)) == 25.0
        assert analyzer_component(AnalyzerResult(overall_score=-10)) == 0.0
        assert analyzer_component(None) is None

    def test_feature_increments(self):
        assert feature_component(FeatureUsageFacts()) == 0
        assert feature_component(FeatureUsageFacts(metrics_runs=1)) == 4
        assert feature_component(FeatureUsageFacts(competitor_count=2, questionnaire_completed=True)) == 5

    def test_all_features_reach_cap(self):
        facts = FeatureUsageFacts(
            metrics_runs=1,
            monitor_runs=1,
            content_pieces=1,
            schema_generations=1,
            analyzer_runs=1,
            competitor_count=1,
            questionnaire_completed=True,
        )
        assert feature_component(facts) == 25


class TestHealthScorer:
    """End-to-end scoring of a project"""

    def test_scenario_score(self, scenario_project, phases):
        """All items done, metrics at 80, analyzer at 60, only metrics used"""
        breakdown = HealthScorer().score(scenario_project, phases)

        assert breakdown.checklist_points == 25.0
        assert breakdown.external_points == 20.0
        assert breakdown.analyzer_points == 15.0
        assert breakdown.feature_points == 4
        assert breakdown.score == 64
        assert breakdown.status == "At Risk"

    def test_missing_components_are_skipped_not_averaged(self, make_snapshot):
        project = ProjectRecord(metrics_history=(make_snapshot(score=100),))
        breakdown = HealthScorer().score(project)

        assert breakdown.score == 29
        assert breakdown.included_components == 2

    def test_empty_project(self):
        assert compute_health_score(ProjectRecord()) == 0

    def test_rounds_half_up(self, make_snapshot):
        # 50% metrics -> 12.5 points, plus 4 for the metrics run
        project = ProjectRecord(metrics_history=(make_snapshot(score=50),))
        assert compute_health_score(project) == 17

    def test_always_within_bounds(self, make_snapshot, make_activity, phases, all_checked):
        project = ProjectRecord(
            checked=all_checked,
            activity_log=(make_activity("analyze"),),
            metrics_history=(make_snapshot(score=250),),
            analyzer_result=AnalyzerResult(overall_score=250),
            monitor_runs=3,
            content_pieces=3,
            schema_generations=3,
            competitors=({"url": "rival.com"},),
            questionnaire_completed_at=datetime(2026, 1, 1, tzinfo=UTC),
        )
        assert compute_health_score(project, phases) == 100

    def test_checking_items_never_lowers_score(self, scenario_project, phases):
        partial = replace(scenario_project, checked={"p1-0": True})
        assert compute_health_score(partial, phases) <= compute_health_score(scenario_project, phases)

    def test_higher_analyzer_never_lowers_score(self, scenario_project, phases):
        better = replace(scenario_project, analyzer_result=AnalyzerResult(overall_score=95))
        assert compute_health_score(better, phases) >= compute_health_score(scenario_project, phases)

    def test_logs_score(self, scenario_project, phases, caplog):
        with caplog.at_level("DEBUG", logger="pulse.ml.health_scorer"):
            HealthScorer().score(scenario_project, phases)
        assert caplog.records[-1].score == 64


class TestHealthStatus:
    @pytest.mark.parametrize(
        "score,status",
        [(100, "Healthy"), (70, "Healthy"), (69, "At Risk"), (40, "At Risk"), (39, "Critical"), (0, "Critical")],
    )
    def test_thresholds(self, score, status):
        assert health_status(score) == status

    def test_status_class(self):
        assert HealthBreakdown(80, None, None, None, 0).status_class == "status-good"
        assert HealthBreakdown(50, None, None, None, 0).status_class == "status-caution"
        assert HealthBreakdown(10, None, None, None, 0).status_class == "status-action"
