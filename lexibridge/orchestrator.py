"""
LexiBridge - Merge Orchestrator

End-to-end handling of a proposed translation.

Pipeline:
    1. Candidate search: up to 20 approved target-language entries whose word
       contains the proposed text OR that share the source entry's category
    2. Scoring: every candidate is scored; the best one is kept. A best score
       of 0.3 or less counts as no candidate at all
    3. Prediction: the case-based predictor supplies confidence and rationale
    4. Decision: decide_action() picks the final action from the static bands
    5. Persistence: merge links the translation to the candidate and its
       concept group and logs an "auto-fusion" case; separate stores the
       translation unlinked; uncertain stores nothing and hands the choice
       back to the caller

Human answers arrive through resolve_proposal() and validate_translation(),
both of which upsert the pair's case record.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from lexibridge.base import (
    CaseContext, DictionaryEntry, Prediction, SimilarityResult, Store, Translation,
    MERGE, SEPARATE, UNCERTAIN, VALIDATION_AUTO, VALIDATION_MANUAL,
    parse_decision,
)
from lexibridge.calibration import ThresholdCalibrator, ThresholdRegistry
from lexibridge.case_memory import CaseMemory
from lexibridge.config import AppConfig, STATIC_SCORING, ScoringConfig
from lexibridge.errors import InvalidVoteError, NotFoundError
from lexibridge.keyword_extractor import KeywordExtractor
from lexibridge.logging_config import get_logger
from lexibridge.pattern_miner import accuracy_by_feature, mine_patterns
from lexibridge.predictor import CaseBasedPredictor
from lexibridge.similarity import SimilarityScorer, adjust_confidence, same_category

logger = get_logger('orchestrator')

AUTO_FUSION_REASON = 'auto-fusion'

MESSAGES = {
    MERGE: 'Translation merged automatically with a similar entry',
    SEPARATE: 'New translation created',
    UNCERTAIN: 'Similar translation detected. Please confirm your choice.',
}

DEFAULT_INSIGHTS = {
    'accuracy_by_feature': {'category': 0.75, 'semantic': 0.7, 'overall': 0.72},
}


@dataclass(frozen=True)
class Decision:
    """Final action for a proposal plus the evidence behind it"""
    action: str
    confidence: float
    reasoning: Tuple[str, ...]


def decide_action(similarity: SimilarityResult, prediction: Prediction,
                  scoring: ScoringConfig = STATIC_SCORING) -> Decision:
    """Single decision policy for proposals

    The action always comes from the static score bands, which keeps
    automatic merges conservative. Confidence and rationale come from the
    case-based prediction; when the prediction disagrees with the static
    action the rationale says so.
    """
    action = scoring.recommend(similarity.score)
    reasoning = list(prediction.reasoning)
    if prediction.action != action:
        reasoning.append(
            f'Static score band chose {action} over the predicted {prediction.action}'
        )
    return Decision(action=action, confidence=prediction.confidence, reasoning=tuple(reasoning))


@dataclass
class Suggestion:
    candidate_id: str
    word: str
    language: str
    score: float
    recommendation: str
    confidence: float
    shared_keywords: List[str]
    same_category: bool
    definition: str = ''
    part_of_speech: str = 'unknown'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'candidate_id': self.candidate_id,
            'word': self.word,
            'language': self.language,
            'score': self.score,
            'recommendation': self.recommendation,
            'confidence': self.confidence,
            'shared_keywords': self.shared_keywords,
            'same_category': self.same_category,
            'definition': self.definition,
            'part_of_speech': self.part_of_speech,
        }


@dataclass
class ProposalResult:
    action: str
    message: str
    success: bool = True
    group_id: Optional[str] = None
    confidence: Optional[float] = None
    translation_id: Optional[str] = None
    candidate: Optional[Suggestion] = None
    reasoning: List[str] = field(default_factory=list)
    translation: Optional[Translation] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'action': self.action,
            'message': self.message,
            'group_id': self.group_id,
            'confidence': self.confidence,
            'translation_id': self.translation_id,
            'candidate': self.candidate.to_dict() if self.candidate else None,
            'reasoning': self.reasoning,
            'translation': self.translation.to_dict() if self.translation else None,
        }


class MergeOrchestrator:
    def __init__(self, store: Store, config: Optional[AppConfig] = None,
                 registry: Optional[ThresholdRegistry] = None):
        self.store = store
        self.config = config or AppConfig()
        self.registry = registry or ThresholdRegistry()
        self.extractor = KeywordExtractor(self.config.keywords)
        self.scorer = SimilarityScorer(self.extractor, self.config.scoring)
        self.memory = CaseMemory(store, canonical_pairs=self.config.orchestrator.canonical_pairs,
                                 scoring=self.config.scoring)
        self.predictor = CaseBasedPredictor(self.memory, self.config.predictor)
        self.calibrator = ThresholdCalibrator(self.config.calibration)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def _require_entry(self, entry_id: str) -> DictionaryEntry:
        entry = self.store.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        return entry

    def _require_translation(self, translation_id: str) -> Translation:
        translation = self.store.get_translation(translation_id)
        if translation is None:
            raise NotFoundError(f"Translation not found: {translation_id}")
        return translation

    def _case_context(self, source_keywords, target_keywords, similarity) -> CaseContext:
        return CaseContext(
            category_match=similarity.category_match,
            source_keywords=frozenset(source_keywords),
            target_keywords=frozenset(target_keywords),
            shared_keywords=similarity.shared_keywords,
        )

    def find_candidates(self, source: DictionaryEntry, target_language: str,
                        text: str) -> List[DictionaryEntry]:
        """Target-language entries matching the proposed word or the source category"""
        return self.store.search_entries(
            target_language,
            text=text,
            category_id=source.category_id,
            limit=self.config.orchestrator.candidate_limit,
            exclude_ids=[source.id],
        )

    def best_candidate(self, source: DictionaryEntry, source_keywords,
                       candidates: List[DictionaryEntry]):
        """Highest scoring candidate above the no-candidate floor, or (None, None)"""
        best_entry, best_similarity = None, None
        for candidate in candidates:
            similarity = self.scorer.score_keywords(
                source_keywords, self.extractor.extract(candidate),
                same_category(source, candidate)
            )
            if best_similarity is None or similarity.score > best_similarity.score:
                best_entry, best_similarity = candidate, similarity

        if best_similarity is None or best_similarity.score <= self.config.orchestrator.no_candidate_floor:
            return None, None
        return best_entry, best_similarity

    def _cache_keywords(self, entry: DictionaryEntry, keywords) -> None:
        if not entry.keywords and keywords:
            self.store.update_entry(entry.id, keywords=set(keywords))

    def _suggestion(self, candidate: DictionaryEntry, similarity: SimilarityResult,
                    prediction: Prediction) -> Suggestion:
        return Suggestion(
            candidate_id=candidate.id,
            word=candidate.word,
            language=candidate.language,
            score=similarity.score,
            recommendation=prediction.action,
            confidence=prediction.confidence,
            shared_keywords=sorted(similarity.shared_keywords),
            same_category=similarity.category_match,
            definition=candidate.first_definition(),
            part_of_speech=candidate.part_of_speech(),
        )

    # =========================================================================
    # PROPOSALS
    # =========================================================================

    def propose_translation(self, source_id: str, target_language: str, text: str,
                            user_id: Optional[str], context: Optional[List[str]] = None,
                            confidence: Optional[float] = None) -> ProposalResult:
        """Decide whether a proposed translation merges into an existing concept"""
        source = self._require_entry(source_id)

        existing = self.store.find_translation(source.id, target_language, text)
        if existing is not None:
            logger.info(f"Translation {existing.id} already exists for {source.id} -> {text!r}")
            return ProposalResult(
                action=MERGE if existing.target_entry_id else SEPARATE,
                message='Translation already exists',
                group_id=existing.translation_group_id,
                confidence=existing.confidence,
                translation_id=existing.id,
                translation=existing,
            )

        source_keywords = self.extractor.extract(source)
        candidates = self.find_candidates(source, target_language, text)
        candidate, similarity = self.best_candidate(source, source_keywords, candidates)

        base_confidence = confidence if confidence is not None else self.config.orchestrator.default_confidence

        if candidate is None:
            logger.info(f"No candidate for {source.id} -> {text!r} ({len(candidates)} searched)")
            translation = self._create_translation(
                source, target_language, text, user_id, context, base_confidence
            )
            self._cache_keywords(source, source_keywords)
            return ProposalResult(
                action=SEPARATE,
                message=MESSAGES[SEPARATE],
                confidence=translation.confidence,
                translation_id=translation.id,
                translation=translation,
                reasoning=['No comparable entry in the target language'],
            )

        prediction = self.predictor.predict(source, candidate, similarity)
        decision = decide_action(similarity, prediction, self.config.scoring)
        suggestion = self._suggestion(candidate, similarity, prediction)
        logger.info(
            f"Proposal {source.id} -> {text!r}: best {candidate.id} "
            f"score={similarity.score:.2f} action={decision.action} "
            f"confidence={decision.confidence:.2f}"
        )

        if decision.action == UNCERTAIN:
            return ProposalResult(
                action=UNCERTAIN,
                message=MESSAGES[UNCERTAIN],
                success=False,
                confidence=decision.confidence,
                candidate=suggestion,
                reasoning=list(decision.reasoning),
            )

        translation_confidence = adjust_confidence(
            base_confidence, similarity.category_match, len(similarity.shared_keywords)
        )
        candidate_keywords = self.extractor.extract(candidate)

        if decision.action == MERGE:
            group_id = self.store.find_or_create_concept_group(
                [set(source_keywords), set(candidate_keywords)], source
            )
            # Case before translation: a failed write must leave nothing a retry would skip
            self.memory.record_decision(
                source.id, candidate.id, similarity.score, MERGE, user_id,
                self._case_context(source_keywords, candidate_keywords, similarity),
                validation_type=VALIDATION_AUTO, reason=AUTO_FUSION_REASON,
            )
            translation = self._create_translation(
                source, target_language, text, user_id, context, translation_confidence,
                target_entry_id=candidate.id, group_id=group_id,
                validation_type=VALIDATION_AUTO,
            )
        else:
            group_id = None
            translation = self._create_translation(
                source, target_language, text, user_id, context, translation_confidence
            )

        self._cache_keywords(source, source_keywords)
        return ProposalResult(
            action=decision.action,
            message=MESSAGES[decision.action],
            group_id=group_id,
            confidence=decision.confidence,
            translation_id=translation.id,
            translation=translation,
            candidate=suggestion,
            reasoning=list(decision.reasoning),
        )

    def resolve_proposal(self, source_id: str, target_language: str, text: str,
                         target_entry_id: str, action: str, user_id: Optional[str],
                         reason: Optional[str] = None) -> ProposalResult:
        """Apply a human answer to an uncertain proposal

        The pair's case is always recorded. merge links the translation to the
        chosen entry, separate stores it unlinked, uncertain stores nothing.
        """
        decision = parse_decision(action)
        source = self._require_entry(source_id)
        target = self._require_entry(target_entry_id)

        source_keywords = self.extractor.extract(source)
        target_keywords = self.extractor.extract(target)
        similarity = self.scorer.score_keywords(
            source_keywords, target_keywords, same_category(source, target)
        )
        self.memory.record_decision(
            source.id, target.id, similarity.score, decision, user_id,
            self._case_context(source_keywords, target_keywords, similarity),
            validation_type=VALIDATION_MANUAL, reason=reason,
        )

        if decision == UNCERTAIN:
            return ProposalResult(
                action=UNCERTAIN,
                message='Decision recorded; no translation stored',
                success=False,
            )

        translation = self.store.find_translation(source.id, target_language, text)
        if translation is None:
            translation = self._create_translation(
                source, target_language, text, user_id, None,
                self.config.orchestrator.default_confidence,
            )

        self._apply_decision(translation, decision, target, user_id, None)
        self._cache_keywords(source, source_keywords)
        return ProposalResult(
            action=decision,
            message=MESSAGES[decision] if decision == SEPARATE else 'Translation merged',
            group_id=translation.translation_group_id,
            confidence=translation.confidence,
            translation_id=translation.id,
            translation=translation,
        )

    def _create_translation(self, source, language, text, user_id, context, confidence,
                            target_entry_id=None, group_id=None,
                            validation_type=VALIDATION_MANUAL) -> Translation:
        translation = Translation(
            id=uuid.uuid4().hex,
            source_entry_id=source.id,
            language=language,
            translated_word=text,
            context=list(context or []),
            confidence=confidence,
            target_entry_id=target_entry_id,
            translation_group_id=group_id,
            validation_type=validation_type,
            created_by=user_id,
        )
        return self.store.add_translation(translation)

    # =========================================================================
    # SUGGESTIONS
    # =========================================================================

    def suggest_candidates(self, source_id: str, target_language: str,
                           search_term: Optional[str] = None,
                           min_similarity: Optional[float] = None) -> List[Suggestion]:
        """Ranked candidate entries a contributor might link the translation to"""
        settings = self.config.orchestrator
        if min_similarity is None:
            min_similarity = settings.suggestion_min_similarity
        source = self._require_entry(source_id)
        source_keywords = self.extractor.extract(source)
        thresholds = self.registry.current()

        suggestions = []
        seen_ids = [source.id]

        def add(candidate):
            similarity = self.scorer.score_keywords(
                source_keywords, self.extractor.extract(candidate),
                same_category(source, candidate), thresholds
            )
            prediction = self.predictor.predict(source, candidate, similarity)
            suggestions.append(self._suggestion(candidate, similarity, prediction))
            return similarity

        if search_term:
            for candidate in self.store.search_entries(
                    target_language, text=search_term,
                    limit=settings.suggestion_search_limit, exclude_ids=seen_ids):
                seen_ids.append(candidate.id)
                similarity = add(candidate)
                if similarity.score < min_similarity:
                    suggestions.pop()

        if len(suggestions) < 5 and source.category_id:
            for candidate in self.store.search_entries(
                    target_language, category_id=source.category_id,
                    limit=settings.suggestion_limit - len(suggestions),
                    exclude_ids=seen_ids):
                add(candidate)

        suggestions.sort(key=lambda s: s.score, reverse=True)
        return suggestions[:settings.suggestion_limit]

    def compare(self, source_id: str, target_id: str) -> Dict[str, Any]:
        """Similarity and prediction for an arbitrary pair"""
        source = self._require_entry(source_id)
        target = self._require_entry(target_id)
        similarity = self.scorer.score(source, target)
        prediction = self.predictor.predict(source, target, similarity)
        return {
            'similarity': similarity.to_dict(),
            'prediction': prediction.to_dict(),
            'thresholds_recommendation': self.registry.current().recommend(similarity.score),
        }

    # =========================================================================
    # VALIDATION AND VOTING
    # =========================================================================

    def _apply_decision(self, translation: Translation, decision: str,
                        target: Optional[DictionaryEntry], user_id: Optional[str],
                        adjusted_confidence: Optional[float]) -> int:
        """Revise a translation's links for a human decision; returns 1 if it changed"""
        before = (translation.target_entry_id, translation.translation_group_id,
                  translation.confidence, translation.validation_type, translation.validated_by)

        if decision == MERGE:
            if translation.target_entry_id != target.id or not translation.translation_group_id:
                source = self._require_entry(translation.source_entry_id)
                translation.translation_group_id = self.store.find_or_create_concept_group(
                    [self.extractor.extract(source), self.extractor.extract(target)], source
                )
            translation.target_entry_id = target.id
            if adjusted_confidence is not None:
                translation.confidence = adjusted_confidence
            translation.validated_by = user_id
            translation.validation_type = VALIDATION_MANUAL
        elif decision == SEPARATE:
            translation.target_entry_id = None
            translation.translation_group_id = None
            if adjusted_confidence is not None:
                translation.confidence = adjusted_confidence
            translation.validated_by = user_id
            translation.validation_type = VALIDATION_MANUAL

        after = (translation.target_entry_id, translation.translation_group_id,
                 translation.confidence, translation.validation_type, translation.validated_by)
        if after == before:
            return 0
        self.store.update_translation(translation)
        return 1

    def validate_translation(self, translation_id: str, action: str, user_id: Optional[str],
                             reason: Optional[str] = None,
                             adjusted_confidence: Optional[float] = None,
                             target_entry_id: Optional[str] = None) -> Dict[str, Any]:
        """Record a human merge/separate decision on an existing translation

        Upserts the case for (source, target) and revises the translation's
        links. Repeating the same validation changes nothing further.
        """
        decision = parse_decision(action)
        translation = self._require_translation(translation_id)
        target_id = target_entry_id or translation.target_entry_id

        target = None
        case = None
        if target_id:
            source = self._require_entry(translation.source_entry_id)
            target = self._require_entry(target_id)
            source_keywords = self.extractor.extract(source)
            target_keywords = self.extractor.extract(target)
            similarity = self.scorer.score_keywords(
                source_keywords, target_keywords, same_category(source, target)
            )
            case = self.memory.record_decision(
                source.id, target.id, similarity.score, decision, user_id,
                self._case_context(source_keywords, target_keywords, similarity),
                validation_type=VALIDATION_MANUAL, reason=reason,
            )
        elif decision == MERGE:
            raise NotFoundError(f"Translation {translation_id} has no target entry to merge with")

        affected = self._apply_decision(translation, decision, target, user_id, adjusted_confidence)
        logger.info(f"Translation {translation_id} validated as {decision} by {user_id} "
                    f"({affected} affected)")
        return {
            'success': True,
            'action': decision,
            'message': f'Translation {"merged" if decision == MERGE else decision} successfully',
            'confidence': translation.confidence,
            'affected_count': affected,
            'translation': translation.to_dict(),
            'case': case.to_dict() if case else None,
        }

    def vote(self, translation_id: str, value: int, user_id: str) -> Dict[str, Any]:
        """One +1 / -1 vote per user per translation"""
        if value not in (1, -1):
            raise InvalidVoteError(f"Vote must be +1 or -1, got {value!r}")
        if not user_id:
            raise InvalidVoteError("Vote requires a user")
        self._require_translation(translation_id)
        new_count = self.store.add_vote(translation_id, user_id, value)
        return {'success': True, 'new_vote_count': new_count}

    # =========================================================================
    # LEARNING
    # =========================================================================

    def get_learning_insights(self, sample_size: Optional[int] = None) -> Dict[str, Any]:
        """Accuracy per feature, recommended thresholds and the top patterns"""
        sample_size = sample_size or self.config.calibration.insight_sample_size
        cases = self.memory.recent_cases(sample_size)
        if not cases:
            return {
                'accuracy_by_feature': dict(DEFAULT_INSIGHTS['accuracy_by_feature']),
                'recommended_thresholds': self.calibrator.recalibrate([]).to_dict(),
                'top_patterns': [],
                'sample_size': 0,
            }

        return {
            'accuracy_by_feature': accuracy_by_feature(cases),
            'recommended_thresholds': self.calibrator.recalibrate(cases).to_dict(),
            'top_patterns': mine_patterns(cases, self.config.calibration.min_pattern_count)[:10],
            'sample_size': len(cases),
        }

    def mine_patterns(self, sample_size: Optional[int] = None) -> List[Dict[str, Any]]:
        cases = self.memory.recent_cases(sample_size or self.config.calibration.insight_sample_size)
        return mine_patterns(cases, self.config.calibration.min_pattern_count)

    def recalibrate_thresholds(self, apply: bool = False,
                               sample_size: Optional[int] = None):
        """Compute a fresh ThresholdConfig; swap it into the registry only if `apply`"""
        cases = self.memory.recent_cases(sample_size or self.config.calibration.insight_sample_size)
        thresholds = self.calibrator.recalibrate(cases)
        if apply:
            thresholds = self.registry.apply(thresholds)
        return thresholds
