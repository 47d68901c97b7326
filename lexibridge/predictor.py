"""
LexiBridge - Case-Based Predictor

Predicts merge / separate / uncertain for a pair from how humans decided
comparable pairs in the past.

Retrieval:
    Up to 50 cases whose stored score lies within +/-0.1 of the current score,
    same-category cases ranked first, most recent first.

Aggregation:
    merge_ratio > 0.7     -> merge      (confidence = merge_ratio)
    separate_ratio > 0.7  -> separate   (confidence = separate_ratio)
    otherwise             -> uncertain  (confidence = max of the two)

With no comparable cases the static recommendation is returned with a fixed
confidence (merge 0.9, uncertain 0.6, separate 0.8).
"""
from typing import List, Optional

from lexibridge.base import (
    CaseRecord, DictionaryEntry, Prediction, SimilarityResult,
    MERGE, SEPARATE, UNCERTAIN,
)
from lexibridge.case_memory import CaseMemory
from lexibridge.config import PredictorConfig
from lexibridge.logging_config import get_logger

logger = get_logger('predictor')


class CaseBasedPredictor:
    def __init__(self, memory: CaseMemory, config: Optional[PredictorConfig] = None):
        self.memory = memory
        self.config = config or PredictorConfig()

    def find_similar_cases(self, similarity: SimilarityResult) -> List[CaseRecord]:
        return self.memory.comparable_cases(
            similarity.score, similarity.category_match,
            window=self.config.score_window, limit=self.config.max_cases
        )

    def default_prediction(self, similarity: SimilarityResult) -> Prediction:
        """Static recommendation with its fixed confidence"""
        action = similarity.recommendation
        confidence = self.config.fallback_confidence[action]
        label = {MERGE: 'High', UNCERTAIN: 'Moderate', SEPARATE: 'Low'}[action]
        return Prediction(
            action=action,
            confidence=confidence,
            reasoning=(
                'No prior cases: prediction based on default thresholds',
                f'{label} score: {similarity.score:.2f}',
            ),
        )

    def predict(self, source: DictionaryEntry, target: DictionaryEntry,
                similarity: SimilarityResult) -> Prediction:
        cases = self.find_similar_cases(similarity)
        if not cases:
            logger.debug(f"No comparable cases for {source.id}->{target.id}, using defaults")
            return self.default_prediction(similarity)

        total = len(cases)
        merges = sum(1 for c in cases if c.human_decision == MERGE)
        separations = sum(1 for c in cases if c.human_decision == SEPARATE)
        merge_ratio = merges / total
        separate_ratio = separations / total

        reasoning = []
        if merge_ratio > self.config.majority_ratio:
            action = MERGE
            confidence = merge_ratio
            reasoning.append(f'{merges}/{total} similar cases were merged')
        elif separate_ratio > self.config.majority_ratio:
            action = SEPARATE
            confidence = separate_ratio
            reasoning.append(f'{separations}/{total} similar cases were kept separate')
        else:
            action = UNCERTAIN
            confidence = max(merge_ratio, separate_ratio)
            reasoning.append(
                f'Split decisions: {merges} merged, {separations} separated '
                f'out of {total} similar cases'
            )

        if similarity.category_match:
            same_category = [c for c in cases if c.context.category_match]
            if same_category:
                rate = sum(1 for c in same_category if c.human_decision == MERGE) / len(same_category)
                reasoning.append(f'Same category: {round(rate * 100)}% merged usually')

        shared_count = len(similarity.shared_keywords)
        if shared_count >= self.config.shared_keyword_insight:
            reasoning.append(f'{shared_count} shared keywords detected')

        return Prediction(
            action=action,
            confidence=confidence,
            reasoning=tuple(reasoning),
            case_count=total,
        )
