"""Keyword Research module -- heuristic estimation, expansion, fan-out and analysis."""

from seo_studio.modules.keyword_research.estimator import KeywordEstimator
from seo_studio.modules.keyword_research.expander import (
    QueryExpander,
    classify_stage,
    intent_for_stage,
)
from seo_studio.modules.keyword_research.analyzer import KeywordAnalyzer

__all__ = [
    "KeywordEstimator",
    "QueryExpander",
    "classify_stage",
    "intent_for_stage",
    "KeywordAnalyzer",
]
