"""
LexiBridge - Configuration Module
Centralized settings for keyword extraction, scoring, prediction and calibration
"""
import os
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Any, FrozenSet, Optional, Tuple, Pattern

from lexibridge.base import MERGE, SEPARATE, UNCERTAIN
from lexibridge.stopwords import STOP_WORDS, SIGNIFICANT_SUFFIXES


def _compile_suffixes(suffixes_by_language):
    patterns = []
    seen = set()
    for suffixes in suffixes_by_language.values():
        for suffix in suffixes:
            if suffix in seen:
                continue
            seen.add(suffix)
            patterns.append(re.compile(f'{re.escape(suffix)}$'))
    return tuple(patterns)


@dataclass(frozen=True)
class KeywordConfig:
    """Stop words and significance rules for keyword extraction"""
    version: str = '1'
    stop_words: FrozenSet[str] = field(default_factory=lambda: frozenset(STOP_WORDS))
    suffix_patterns: Tuple[Pattern, ...] = field(
        default_factory=lambda: _compile_suffixes(SIGNIFICANT_SUFFIXES)
    )
    min_token_length: int = 3
    long_token_length: int = 6
    min_suffix_token_length: int = 4
    max_tokens_per_example: int = 3


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and static recommendation bands for similarity scoring"""
    category_weight: float = 0.5
    semantic_weight: float = 0.5
    specific_keyword_length: int = 6
    specific_keyword_bonus: float = 0.1
    merge_above: float = 0.9
    uncertain_above: float = 0.6

    def recommend(self, score: float) -> str:
        if score > self.merge_above:
            return MERGE
        elif score > self.uncertain_above:
            return UNCERTAIN
        return SEPARATE


@dataclass(frozen=True)
class PredictorConfig:
    """Case retrieval window and aggregation cut-offs"""
    score_window: float = 0.1
    max_cases: int = 50
    majority_ratio: float = 0.7
    shared_keyword_insight: int = 3
    fallback_confidence: Dict[str, float] = field(default_factory=lambda: {
        MERGE: 0.9,
        UNCERTAIN: 0.6,
        SEPARATE: 0.8,
    })


@dataclass(frozen=True)
class CalibrationConfig:
    """Percentile calibration bounds"""
    min_cases: int = 10
    merge_percentile: float = 0.1
    separate_percentile: float = 0.9
    auto_merge_bounds: Tuple[float, float] = (0.8, 0.95)
    ask_user_bounds: Tuple[float, float] = (0.5, 0.8)
    auto_separate_bounds: Tuple[float, float] = (0.1, 0.5)
    min_pattern_count: int = 5
    insight_sample_size: int = 1000


@dataclass(frozen=True)
class OrchestratorConfig:
    """Candidate search and decision policy settings"""
    candidate_limit: int = 20
    no_candidate_floor: float = 0.3
    default_confidence: float = 0.8
    suggestion_limit: int = 10
    suggestion_search_limit: int = 10
    suggestion_min_similarity: float = 0.3
    canonical_pairs: bool = False


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Learned decision thresholds.
    Instances are immutable snapshots; the registry swaps whole objects.
    """
    auto_merge_threshold: float = 0.9
    ask_user_threshold: float = 0.6
    auto_separate_threshold: float = 0.4
    version: int = 0
    sample_size: int = 0
    source: str = 'default'
    computed_at: Optional[datetime] = None

    def recommend(self, score: float) -> str:
        """Map a score onto the merge / ask / separate bands of this snapshot"""
        if score > self.auto_merge_threshold:
            return MERGE
        if score <= self.auto_separate_threshold:
            return SEPARATE
        return UNCERTAIN

    def with_version(self, version: int) -> 'ThresholdConfig':
        return replace(self, version=version)

    def to_dict(self) -> dict:
        return {
            'auto_merge_threshold': self.auto_merge_threshold,
            'ask_user_threshold': self.ask_user_threshold,
            'auto_separate_threshold': self.auto_separate_threshold,
            'version': self.version,
            'sample_size': self.sample_size,
            'source': self.source,
            'computed_at': self.computed_at.isoformat() if self.computed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ThresholdConfig':
        computed_at = data.get('computed_at')
        return cls(
            auto_merge_threshold=data.get('auto_merge_threshold', 0.9),
            ask_user_threshold=data.get('ask_user_threshold', 0.6),
            auto_separate_threshold=data.get('auto_separate_threshold', 0.4),
            version=data.get('version', 0),
            sample_size=data.get('sample_size', 0),
            source=data.get('source', 'default'),
            computed_at=datetime.fromisoformat(computed_at) if computed_at else None,
        )


DEFAULT_THRESHOLDS = ThresholdConfig()
STATIC_SCORING = ScoringConfig()


@dataclass
class AppConfig:
    """Main application configuration"""
    keywords: KeywordConfig = field(default_factory=KeywordConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    predictor: PredictorConfig = field(default_factory=PredictorConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)

    database_url: str = ''
    thresholds_file: str = ''
    debug_mode: bool = False

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration from environment and defaults"""
        orchestrator = OrchestratorConfig(
            candidate_limit=int(os.environ.get('LEXIBRIDGE_CANDIDATE_LIMIT', '20')),
            canonical_pairs=os.environ.get('LEXIBRIDGE_CANONICAL_PAIRS', 'false').lower() == 'true',
        )
        config = cls(
            orchestrator=orchestrator,
            database_url=os.environ.get('DATABASE_URL', ''),
            thresholds_file=os.environ.get(
                'LEXIBRIDGE_THRESHOLDS_FILE',
                os.path.join(os.path.dirname(__file__), 'thresholds.json')
            ),
        )

        if os.environ.get('DEBUG', '').lower() == 'true':
            config.debug_mode = True

        return config

    def get_settings(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Flat view of the tunable settings, with optional overrides"""
        settings = {
            'candidate_limit': self.orchestrator.candidate_limit,
            'no_candidate_floor': self.orchestrator.no_candidate_floor,
            'canonical_pairs': self.orchestrator.canonical_pairs,
            'score_window': self.predictor.score_window,
            'max_cases': self.predictor.max_cases,
            'min_calibration_cases': self.calibration.min_cases,
            'keyword_config_version': self.keywords.version,
        }

        if overrides:
            settings.update(overrides)

        return settings
