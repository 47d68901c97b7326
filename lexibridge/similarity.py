"""
LexiBridge - Similarity Scorer

Scores how likely two dictionary entries denote the same concept.

Scoring Formula:
    category_score = 1.0 if both entries share a non-null category else 0.0
    semantic_score = min(1, jaccard(keywords_a, keywords_b) + 0.1 * specific_shared)
    score          = clamp01(0.5 * category_score + 0.5 * semantic_score)

    Where specific_shared counts shared keywords longer than 6 letters.

Recommendation Bands (static defaults):
    score > 0.9         -> merge
    0.6 < score <= 0.9  -> uncertain
    score <= 0.6        -> separate

A category mismatch caps the score at 0.5, so keyword overlap alone never
reaches the merge band.
"""
from typing import Optional, Set

from lexibridge.base import DictionaryEntry, SimilarityResult
from lexibridge.config import ScoringConfig, ThresholdConfig
from lexibridge.keyword_extractor import KeywordExtractor, keyword_extractor


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def jaccard(a: Set[str], b: Set[str]) -> float:
    """|a & b| / |a | b|, defined as 0 when either set is empty"""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def same_category(a: DictionaryEntry, b: DictionaryEntry) -> bool:
    if not a.category_id or not b.category_id:
        return False
    return str(a.category_id) == str(b.category_id)


class SimilarityScorer:
    def __init__(self, extractor: Optional[KeywordExtractor] = None,
                 config: Optional[ScoringConfig] = None):
        self.extractor = extractor or keyword_extractor
        self.config = config or ScoringConfig()

    def semantic_similarity(self, keywords_a, keywords_b):
        """Jaccard ratio plus the specific-term bonus, capped at 1.0

        Returns:
            tuple: (similarity, shared keywords)
        """
        if not keywords_a or not keywords_b:
            return 0.0, frozenset()

        shared = frozenset(keywords_a & keywords_b)
        ratio = jaccard(keywords_a, keywords_b)
        specific = sum(1 for kw in shared if len(kw) > self.config.specific_keyword_length)
        bonus = specific * self.config.specific_keyword_bonus
        return min(1.0, ratio + bonus), shared

    def score(self, a: DictionaryEntry, b: DictionaryEntry,
              thresholds: Optional[ThresholdConfig] = None) -> SimilarityResult:
        return self.score_keywords(
            self.extractor.extract(a), self.extractor.extract(b),
            same_category(a, b), thresholds
        )

    def score_keywords(self, keywords_a: Set[str], keywords_b: Set[str],
                       category_match: bool,
                       thresholds: Optional[ThresholdConfig] = None) -> SimilarityResult:
        """Score from pre-extracted keyword sets

        Uses the bands of `thresholds` for the recommendation when given,
        otherwise the static defaults.
        """
        category_score = 1.0 if category_match else 0.0
        semantic_score, shared = self.semantic_similarity(set(keywords_a), set(keywords_b))

        final_score = clamp01(
            self.config.category_weight * category_score
            + self.config.semantic_weight * semantic_score
        )

        if thresholds is not None:
            recommendation = thresholds.recommend(final_score)
        else:
            recommendation = self.config.recommend(final_score)

        return SimilarityResult(
            score=final_score,
            category_match=category_match,
            shared_keywords=shared,
            semantic_score=semantic_score,
            category_score=category_score,
            recommendation=recommendation,
        )


def adjust_confidence(base_score, category_match, shared_keyword_count,
                      historical_accuracy=None):
    """Nudge a submitted translation confidence with the evidence at hand

    Historical accuracy shifts the score by up to +/-0.1, a shared category
    adds 0.1 and three or more shared keywords add 0.05.
    """
    adjusted = base_score
    if historical_accuracy is not None:
        adjusted += (historical_accuracy - 0.5) * 0.2
    if category_match:
        adjusted += 0.1
    if shared_keyword_count >= 3:
        adjusted += 0.05
    return clamp01(adjusted)

