"""
Centralized scoring thresholds -- single source of truth.

All threshold values used by the correlation engine (similarity gates,
duplicate detection, clustering, matching) are defined here.  Individual
services import these constants instead of hard-coding magic numbers.

The values serve as defaults; the settings service and environment
overrides can change them at runtime.  None of them were derived from
labeled data, so treat them as tuning knobs.
"""

# ---------------------------------------------------------------------------
# Pairwise report similarity: per-signal gates and weights
# ---------------------------------------------------------------------------

# Title text similarity must exceed this to count as a signal
TITLE_SIMILARITY_GATE = 0.5
TITLE_WEIGHT = 2.5

# Description text similarity gate (descriptions are longer and noisier)
DESCRIPTION_SIMILARITY_GATE = 0.4
DESCRIPTION_WEIGHT = 2.0

# Flat-strength attribute equality signals
CATEGORY_WEIGHT = 1.5
SEVERITY_WEIGHT = 0.5

# Reports farther apart than this never get a proximity signal
PROXIMITY_RADIUS_KM = 5.0
PROXIMITY_WEIGHT = 2.0

# Reports created further apart than this never get a temporal signal
TIME_WINDOW_HOURS = 24.0
TIME_SIMILARITY_GATE = 0.3
TIME_WEIGHT = 1.0

# Blend used by the text scorer
TEXT_JACCARD_WEIGHT = 0.6
TEXT_EDIT_WEIGHT = 0.4

# ---------------------------------------------------------------------------
# Duplicate detection and clustering
# ---------------------------------------------------------------------------

# Minimum combined similarity for a report to count as "similar"
# (also the clustering membership threshold)
SIMILARITY_THRESHOLD = 0.70

# A similar/duplicate finding needs this many independent signals
MIN_CORROBORATING_SIGNALS = 2

# Top similar report must reach this to be declared a duplicate
DUPLICATE_THRESHOLD = 0.85

# Verdict confidence above which link edges are proposed
LINK_CONFIDENCE_THRESHOLD = 0.5

# Maximum link edges proposed for a new report
MAX_LINKS_PER_REPORT = 5

# Default bound on the recent-report pool
MAX_POOL_SIZE = 200

# ---------------------------------------------------------------------------
# Resource matching (scores are on a 0-100 scale)
# ---------------------------------------------------------------------------

MATCH_BASE_SCORE = 50
MATCH_MAX_SUFFICIENCY_BONUS = 20

# (upper bound km, bonus) checked in order; anything else gets the default
MATCH_PROXIMITY_BANDS = ((5.0, 30), (20.0, 20), (50.0, 10))
MATCH_DEFAULT_PROXIMITY_BONUS = 10

# Offer-initiated matching favors the most urgent unmet need
MATCH_URGENCY_BONUS = {
    "critical": 15,
    "high": 10,
    "medium": 5,
    "low": 0,
}

# Matches below this score are not proposed
MIN_MATCH_SCORE = 40

# Number of ranked proposals returned
MAX_MATCHES = 5

# Time budget for the external scoring strategy
SCORER_TIMEOUT_SECONDS = 10.0
