"""
Correlation and matching services.
"""

from .similarity import IncidentSimilarityScorer, SimilarityResult
from .duplicate_detection import (
    DuplicateDetector,
    DuplicateVerdict,
    LinkProposal,
    apply_link_proposals,
    most_recent,
)
from .report_clustering import (
    ReportCluster,
    ReportClusteringService,
    merge_clusters,
    cluster_link_proposals,
    summarize_clusters,
)
from .matching import Match, MatchingService
from .match_scoring import (
    MatchScoringStrategy,
    GuardedMatchScorer,
    LLMMatchScorer,
    OfferCandidate,
    ExternalScore,
)
from .llm_provider import LLMRouter, LLMResponse
from .llm_errors import LLMError, ErrorCategory
from .settings import (
    AllSettings,
    SimilaritySettings,
    DuplicateDetectionSettings,
    MatchingSettings,
    LLMSettings,
    SettingsService,
    load_settings,
)
from .engine import ReliefEngine, build_engine

__all__ = [
    # Similarity
    "IncidentSimilarityScorer",
    "SimilarityResult",
    # Duplicate Detection
    "DuplicateDetector",
    "DuplicateVerdict",
    "LinkProposal",
    "apply_link_proposals",
    "most_recent",
    # Clustering
    "ReportCluster",
    "ReportClusteringService",
    "merge_clusters",
    "cluster_link_proposals",
    "summarize_clusters",
    # Matching
    "Match",
    "MatchingService",
    "MatchScoringStrategy",
    "GuardedMatchScorer",
    "LLMMatchScorer",
    "OfferCandidate",
    "ExternalScore",
    # LLM Provider
    "LLMRouter",
    "LLMResponse",
    "LLMError",
    "ErrorCategory",
    # Settings
    "AllSettings",
    "SimilaritySettings",
    "DuplicateDetectionSettings",
    "MatchingSettings",
    "LLMSettings",
    "SettingsService",
    "load_settings",
    # Engine
    "ReliefEngine",
    "build_engine",
]
