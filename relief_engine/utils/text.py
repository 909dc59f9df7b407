"""
Lexical similarity between short free-text fields (titles, descriptions).

Two measures are blended:

- word-set Jaccard, which ignores word order, and
- normalized Levenshtein similarity, which catches typos and near-identical
  phrasing that tokenization would split apart.
"""

from rapidfuzz.distance import Levenshtein

JACCARD_WEIGHT = 0.6
EDIT_WEIGHT = 0.4


def normalize_text(text: str) -> str:
    """Lowercase and trim."""
    if not text:
        return ""
    return text.lower().strip()


def jaccard_similarity(set1: set, set2: set) -> float:
    """Calculate Jaccard similarity between two sets."""
    union = len(set1 | set2)
    if union == 0:
        return 0.0
    return len(set1 & set2) / union


def word_jaccard(text1: str, text2: str) -> float:
    """Jaccard similarity over whitespace-separated word sets."""
    return jaccard_similarity(
        set(normalize_text(text1).split()),
        set(normalize_text(text2).split()),
    )


def edit_similarity(text1: str, text2: str) -> float:
    """1 - levenshtein(a, b) / max(len(a), len(b)) on normalized text."""
    return Levenshtein.normalized_similarity(normalize_text(text1), normalize_text(text2))


def text_similarity(
    text1: str,
    text2: str,
    jaccard_weight: float = JACCARD_WEIGHT,
    edit_weight: float = EDIT_WEIGHT,
) -> float:
    """
    Blend word-set Jaccard and edit similarity into a score in [0, 1].

    An exact match after normalization scores 1.0, including two empty
    strings.
    """
    n1 = normalize_text(text1)
    n2 = normalize_text(text2)

    if n1 == n2:
        return 1.0

    score = jaccard_weight * word_jaccard(n1, n2) + edit_weight * edit_similarity(n1, n2)
    return max(0.0, min(1.0, score))
