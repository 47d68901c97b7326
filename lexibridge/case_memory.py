"""
LexiBridge - Case Memory
Log of human adjudications, one record per entry pair.

Writes go through the repository's upsert, which relies on the storage-level
unique constraint on (source_entry_id, target_entry_id). Re-adjudicating a
pair overwrites its record.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from lexibridge.base import (
    CaseContext, CaseQuery, CaseRecord, CaseRepository, VALIDATION_MANUAL,
    parse_decision,
)
from lexibridge.config import STATIC_SCORING, ScoringConfig
from lexibridge.logging_config import get_logger

logger = get_logger('case_memory')

_SCORE_EPSILON = 1e-9


def was_prediction_correct(similarity_score: float, human_decision: str,
                           scoring: ScoringConfig = STATIC_SCORING) -> bool:
    """Whether the static bands would have predicted the human decision"""
    return scoring.recommend(similarity_score) == human_decision


class CaseMemory:
    def __init__(self, repository: CaseRepository, canonical_pairs: bool = False,
                 scoring: ScoringConfig = STATIC_SCORING):
        self.repository = repository
        self.canonical_pairs = canonical_pairs
        self.scoring = scoring

    def pair_key(self, source_entry_id: str, target_entry_id: str) -> Tuple[str, str]:
        """Pair identity used for storage; sorted when pairs are canonical"""
        if self.canonical_pairs and str(target_entry_id) < str(source_entry_id):
            return target_entry_id, source_entry_id
        return source_entry_id, target_entry_id

    def find_case(self, source_entry_id: str, target_entry_id: str) -> Optional[CaseRecord]:
        return self.repository.find_case_by_pair(*self.pair_key(source_entry_id, target_entry_id))

    def record_decision(self, source_entry_id: str, target_entry_id: str,
                        similarity_score: float, human_decision: str,
                        validated_by: Optional[str], context: CaseContext,
                        validation_type: str = VALIDATION_MANUAL,
                        reason: Optional[str] = None) -> CaseRecord:
        """Upsert the adjudication of a pair"""
        decision = parse_decision(human_decision)
        source_id, target_id = self.pair_key(source_entry_id, target_entry_id)
        now = datetime.now()

        existing = self.repository.find_case_by_pair(source_id, target_id)
        record = CaseRecord(
            source_entry_id=source_id,
            target_entry_id=target_id,
            similarity_score=similarity_score,
            human_decision=decision,
            validated_by=validated_by,
            context=context,
            validation_type=validation_type,
            reason=reason,
            was_correct_prediction=was_prediction_correct(similarity_score, decision, self.scoring),
            created_at=existing.created_at if existing else now,
            decided_at=now,
        )
        saved = self.repository.upsert_case(record)

        if existing:
            logger.info(f"Case {source_id}->{target_id} re-adjudicated: "
                        f"{existing.human_decision} -> {decision}")
        else:
            logger.info(f"Case {source_id}->{target_id} recorded: {decision} "
                        f"(score {similarity_score:.2f})")
        return saved

    def comparable_cases(self, score: float, category_match: bool,
                         window: float = 0.1, limit: int = 50) -> List[CaseRecord]:
        """Cases scored within `window` of `score`, most recent first

        Cases with the same category_match come first; the rest of the window
        fills any remaining room.
        """
        low = max(0.0, score - window) - _SCORE_EPSILON
        high = min(1.0, score + window) + _SCORE_EPSILON

        preferred = self.repository.query_cases(CaseQuery(
            min_score=low, max_score=high, category_match=category_match, limit=limit
        ))
        if len(preferred) >= limit:
            return preferred[:limit]

        others = self.repository.query_cases(CaseQuery(
            min_score=low, max_score=high, category_match=not category_match,
            limit=limit - len(preferred)
        ))
        return preferred + others

    def recent_cases(self, limit: Optional[int] = None) -> List[CaseRecord]:
        return self.repository.query_cases(CaseQuery(limit=limit))
