"""
Project domain models

Read-only view of a project document from the surrounding project store:
    - ProjectRecord: Everything the engines read from one project
    - CitationShareSnapshot / BrandShare: Brand share-of-voice history
    - MonitorSettings: Auto re-check configuration
    - FeatureUsageFacts / FeatureUsage: Which product features the project used

The engines never write to these objects; the store owns persistence.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pulse.domain.activity import ActivityKind, ActivityRecord, parse_activity_log
from pulse.domain.metrics import MetricSnapshot, MetricsSnapshot, as_number
from pulse.utils.datetime_utils import parse_iso_timestamp
from pulse.utils.error_handling import log_and_return_default

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerResult:
    """Latest site analyzer run; only the overall score feeds the engines."""

    overall_score: float = 0


@dataclass(frozen=True)
class BrandShare:
    name: str
    is_own: bool = False
    total_mentions: int = 0
    share_percent: float = 0
    by_engine: Mapping[str, int] = field(default_factory=dict, hash=False)


@dataclass(frozen=True, kw_only=True)
class CitationShareSnapshot(MetricSnapshot):
    """
    One citation share-of-voice check across tracked brands.

    Attributes:
        timestamp: When the check ran (inherited from MetricSnapshot)
        brands: Brand id -> share figures; exactly one brand should be ``is_own``
        query_results: Raw per-query results, passed through untouched
    """

    brands: Mapping[str, BrandShare] = field(default_factory=dict, hash=False)
    query_results: tuple[Any, ...] = ()

    @property
    def own_brand(self) -> BrandShare | None:
        return next((b for b in self.brands.values() if b.is_own), None)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CitationShareSnapshot":
        """
        Raises:
            ValueError: If the timestamp is missing or not ISO 8601
        """
        timestamp = parse_iso_timestamp(raw.get("timestamp"))
        if timestamp is None:
            raise ValueError("citation share snapshot is missing a timestamp")

        brands = {}
        for brand_id, brand in (raw.get("brands") or {}).items():
            if not isinstance(brand, Mapping):
                continue
            brands[str(brand_id)] = BrandShare(
                name=str(brand.get("name") or brand_id),
                is_own=bool(brand.get("isOwn")),
                total_mentions=int(as_number(brand.get("totalMentions"))),
                share_percent=as_number(brand.get("sharePercent")),
                by_engine={str(k): int(as_number(v)) for k, v in (brand.get("byEngine") or {}).items()},
            )

        return cls(timestamp=timestamp, brands=brands, query_results=tuple(raw.get("queryResults") or ()))


@dataclass(frozen=True)
class MonitorSettings:
    """
    Auto re-check configuration for the citation share monitor.

    Attributes:
        enabled: Whether scheduled checks run at all
        interval: Interval option key ("1d", "3d", "7d", "14d", "30d")
    """

    enabled: bool = False
    interval: str = "7d"


@dataclass(frozen=True)
class FeatureUsageFacts:
    """
    Per-feature usage facts, derived from a project's histories.

    Attributes:
        metrics_runs: Metrics snapshots captured
        monitor_runs: Monitoring runs recorded
        content_pieces: Content pieces written
        schema_generations: Schema documents generated
        analyzer_runs: ``analyze`` entries in the activity log. A stored
            analyzer result feeds the health analyzer component but does
            not count as feature use on its own
        competitor_count: Competitors tracked
        questionnaire_completed: Whether onboarding questionnaire was completed
    """

    metrics_runs: int = 0
    monitor_runs: int = 0
    content_pieces: int = 0
    schema_generations: int = 0
    analyzer_runs: int = 0
    competitor_count: int = 0
    questionnaire_completed: bool = False

    def table(self) -> list["FeatureUsage"]:
        """The six features shown on the dashboard, in display order."""
        return [
            FeatureUsage("Analyzer", self.analyzer_runs > 0, self.analyzer_runs),
            FeatureUsage("Writer", self.content_pieces > 0, self.content_pieces),
            FeatureUsage("Schema", self.schema_generations > 0, self.schema_generations),
            FeatureUsage("Monitoring", self.monitor_runs > 0, self.monitor_runs),
            FeatureUsage("Metrics", self.metrics_runs > 0, self.metrics_runs),
            FeatureUsage("Competitors", self.competitor_count > 0, self.competitor_count),
        ]

    @property
    def features_used(self) -> int:
        return sum(1 for feature in self.table() if feature.used)

    @property
    def total_features(self) -> int:
        return len(self.table())


@dataclass(frozen=True)
class FeatureUsage:
    name: str
    used: bool
    count: int


@dataclass(frozen=True)
class ProjectRecord:
    """
    Read-only snapshot of one project document.

    Attributes:
        id: Project id
        url: Project site URL (a re-check prerequisite)
        checked: Checklist state, item id -> done
        metrics_history: Metrics snapshots, capture order
        activity_log: Activity entries, newest first as stored
        citation_share_history: Citation share snapshots, capture order
        competitors: Tracked competitor documents
        analyzer_result: Latest analyzer result, if any
        monitor_runs / content_pieces / schema_generations: History lengths
        questionnaire_completed_at: Onboarding questionnaire completion time
        created_at: Project creation time
        monitor_settings: Auto re-check settings
        last_run: Last successful citation share check
    """

    id: str = ""
    url: str = ""
    checked: Mapping[str, bool] = field(default_factory=dict, hash=False)
    metrics_history: tuple[MetricsSnapshot, ...] = ()
    activity_log: tuple[ActivityRecord, ...] = ()
    citation_share_history: tuple[CitationShareSnapshot, ...] = ()
    competitors: tuple[Any, ...] = ()
    analyzer_result: AnalyzerResult | None = None
    monitor_runs: int = 0
    content_pieces: int = 0
    schema_generations: int = 0
    questionnaire_completed_at: datetime | None = None
    created_at: datetime | None = None
    monitor_settings: MonitorSettings = field(default_factory=MonitorSettings)
    last_run: datetime | None = None

    @property
    def latest_metrics(self) -> MetricsSnapshot | None:
        return self.metrics_history[-1] if self.metrics_history else None

    def feature_usage(self) -> FeatureUsageFacts:
        return FeatureUsageFacts(
            metrics_runs=len(self.metrics_history),
            monitor_runs=self.monitor_runs,
            content_pieces=self.content_pieces,
            schema_generations=self.schema_generations,
            analyzer_runs=sum(1 for entry in self.activity_log if entry.kind == ActivityKind.ANALYZE),
            competitor_count=len(self.competitors),
            questionnaire_completed=self.questionnaire_completed_at is not None,
        )

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ProjectRecord":
        """
        Map a stored project document (camelCase keys) to a record.

        Snapshot and activity timestamps are validated strictly. Optional
        bookkeeping dates that fail to parse are logged and treated as absent.
        """
        analyzer = raw.get("analyzerResults")
        settings = raw.get("settings") or {}
        questionnaire = raw.get("questionnaire") or {}

        return cls(
            id=str(raw.get("id") or ""),
            url=str(raw.get("url") or ""),
            checked={str(k): bool(v) for k, v in (raw.get("checked") or {}).items()},
            metrics_history=tuple(MetricsSnapshot.from_dict(m) for m in raw.get("metricsHistory") or ()),
            activity_log=parse_activity_log(raw.get("activityLog") or ()),
            citation_share_history=tuple(
                CitationShareSnapshot.from_dict(s) for s in raw.get("citationShareHistory") or ()
            ),
            competitors=tuple(raw.get("competitors") or ()),
            analyzer_result=(
                AnalyzerResult(overall_score=as_number(analyzer.get("overallScore")))
                if isinstance(analyzer, Mapping)
                else None
            ),
            monitor_runs=len(raw.get("monitorHistory") or ()),
            content_pieces=len(raw.get("contentHistory") or ()),
            schema_generations=len(raw.get("schemaHistory") or ()),
            questionnaire_completed_at=_optional_date(questionnaire.get("completedAt"), "questionnaire.completedAt"),
            created_at=_optional_date(raw.get("createdAt"), "createdAt"),
            monitor_settings=MonitorSettings(
                enabled=bool(settings.get("brandMonitorEnabled")),
                interval=str(settings.get("brandMonitorInterval") or "7d"),
            ),
            last_run=_optional_date(raw.get("lastCitationShareRun"), "lastCitationShareRun"),
        )


def _optional_date(value: Any, field_name: str) -> datetime | None:
    try:
        return parse_iso_timestamp(value)
    except ValueError as e:
        return log_and_return_default(
            logger, e, context={"field": field_name, "value": value}, default_value=None, error_type="Date parsing"
        )
