"""Quality aggregation: scoring, planning, monitoring and the orchestrator."""

from .inspector import ALERT_TYPE, QualityInspector, parse_timeframe
from .models import (
    Assessment,
    LegResults,
    QualityReport,
    QuickReport,
    Recommendation,
    Risk,
    RiskAssessment,
    TrendPrediction,
)
from .monitoring import MonitoringHandle, MonitorState
from .planning import build_test_plan
from .scoring import (
    CATEGORY_WEIGHTS,
    assess_risks,
    compute_breakdown,
    generate_recommendations,
    overall_score,
)

__all__ = [
    "ALERT_TYPE",
    "Assessment",
    "CATEGORY_WEIGHTS",
    "LegResults",
    "MonitorState",
    "MonitoringHandle",
    "QualityInspector",
    "QualityReport",
    "QuickReport",
    "Recommendation",
    "Risk",
    "RiskAssessment",
    "TrendPrediction",
    "assess_risks",
    "build_test_plan",
    "compute_breakdown",
    "generate_recommendations",
    "overall_score",
    "parse_timeframe",
]
