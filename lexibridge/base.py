"""
LexiBridge - Base Classes and Interfaces
Domain records shared by the merge engine and abstract repositories
implemented by the storage adapters
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Set, FrozenSet, Iterable, Tuple

from lexibridge.errors import InvalidDecisionError


MERGE = 'merge'
SEPARATE = 'separate'
UNCERTAIN = 'uncertain'
DECISIONS = (MERGE, SEPARATE, UNCERTAIN)

VALIDATION_AUTO = 'auto'
VALIDATION_MANUAL = 'manual'

STATUS_APPROVED = 'approved'


def make_concept_id(word: str) -> str:
    """Concept id derived from the primary word and the creation time"""
    return f'CONCEPT_{word.upper()}_{time.time_ns() // 1000}'


def parse_decision(value: str) -> str:
    """Normalize a decision string, rejecting anything outside merge/separate/uncertain"""
    decision = (value or '').strip().lower()
    if decision not in DECISIONS:
        raise InvalidDecisionError(f"Unknown decision: {value!r}")
    return decision


@dataclass
class Meaning:
    """One sense of a dictionary entry"""
    part_of_speech: str = ''
    definitions: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'part_of_speech': self.part_of_speech,
            'definitions': list(self.definitions),
            'examples': list(self.examples),
            'synonyms': list(self.synonyms),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Meaning':
        return cls(
            part_of_speech=data.get('part_of_speech', ''),
            definitions=list(data.get('definitions', [])),
            examples=list(data.get('examples', [])),
            synonyms=list(data.get('synonyms', [])),
        )


@dataclass
class DictionaryEntry:
    """A headword in one language, owned by the content layer"""
    id: str
    word: str
    language: str
    category_id: Optional[str] = None
    meanings: List[Meaning] = field(default_factory=list)
    keywords: Optional[Set[str]] = None
    etymology: Optional[str] = None
    status: str = STATUS_APPROVED

    def first_definition(self) -> str:
        for meaning in self.meanings:
            if meaning.definitions:
                return meaning.definitions[0]
        return ''

    def part_of_speech(self) -> str:
        return self.meanings[0].part_of_speech if self.meanings else 'unknown'


@dataclass
class Translation:
    """Directed edge from a source entry to a word in another language"""
    id: str
    source_entry_id: str
    language: str
    translated_word: str
    context: List[str] = field(default_factory=list)
    confidence: float = 0.8
    votes: int = 0
    voted_by: Set[str] = field(default_factory=set)
    target_entry_id: Optional[str] = None
    translation_group_id: Optional[str] = None
    validation_type: str = VALIDATION_MANUAL
    created_by: Optional[str] = None
    validated_by: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'source_entry_id': self.source_entry_id,
            'language': self.language,
            'translated_word': self.translated_word,
            'context': list(self.context),
            'confidence': self.confidence,
            'votes': self.votes,
            'target_entry_id': self.target_entry_id,
            'translation_group_id': self.translation_group_id,
            'validation_type': self.validation_type,
            'created_by': self.created_by,
            'validated_by': self.validated_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class SimilarityResult:
    """Outcome of comparing two entries; recomputed on every comparison"""
    score: float
    category_match: bool
    shared_keywords: FrozenSet[str]
    semantic_score: float
    category_score: float
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'category_match': self.category_match,
            'shared_keywords': sorted(self.shared_keywords),
            'semantic_score': self.semantic_score,
            'category_score': self.category_score,
            'recommendation': self.recommendation,
        }


@dataclass(frozen=True)
class CaseContext:
    """Feature context captured when a pair is adjudicated"""
    category_match: bool = False
    source_keywords: FrozenSet[str] = frozenset()
    target_keywords: FrozenSet[str] = frozenset()
    shared_keywords: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category_match': self.category_match,
            'source_keywords': sorted(self.source_keywords),
            'target_keywords': sorted(self.target_keywords),
            'shared_keywords': sorted(self.shared_keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaseContext':
        return cls(
            category_match=bool(data.get('category_match', False)),
            source_keywords=frozenset(data.get('source_keywords', [])),
            target_keywords=frozenset(data.get('target_keywords', [])),
            shared_keywords=frozenset(data.get('shared_keywords', [])),
        )


@dataclass
class CaseRecord:
    """One human adjudication between two entries"""
    source_entry_id: str
    target_entry_id: str
    similarity_score: float
    human_decision: str
    validated_by: Optional[str]
    context: CaseContext = field(default_factory=CaseContext)
    validation_type: str = VALIDATION_MANUAL
    reason: Optional[str] = None
    was_correct_prediction: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    decided_at: datetime = field(default_factory=datetime.now)

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.source_entry_id, self.target_entry_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source_entry_id': self.source_entry_id,
            'target_entry_id': self.target_entry_id,
            'similarity_score': self.similarity_score,
            'human_decision': self.human_decision,
            'validated_by': self.validated_by,
            'context': self.context.to_dict(),
            'validation_type': self.validation_type,
            'reason': self.reason,
            'was_correct_prediction': self.was_correct_prediction,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'decided_at': self.decided_at.isoformat() if self.decided_at else None,
        }


@dataclass(frozen=True)
class CaseQuery:
    """Filter for case retrieval; results are ordered most recent first"""
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    category_match: Optional[bool] = None
    limit: Optional[int] = None

    def matches(self, case: CaseRecord) -> bool:
        if self.min_score is not None and case.similarity_score < self.min_score:
            return False
        if self.max_score is not None and case.similarity_score > self.max_score:
            return False
        if self.category_match is not None and case.context.category_match != self.category_match:
            return False
        return True


@dataclass(frozen=True)
class Prediction:
    """Predicted action for a pair, with the evidence behind it"""
    action: str
    confidence: float
    reasoning: Tuple[str, ...] = ()
    case_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'action': self.action,
            'confidence': self.confidence,
            'reasoning': list(self.reasoning),
            'case_count': self.case_count,
        }


@dataclass
class ConceptGroup:
    """Cluster of translations sharing one meaning"""
    id: str
    concept_id: str
    primary_word: str
    primary_language: str
    category_id: Optional[str] = None
    keywords: Set[str] = field(default_factory=set)
    total_translations: int = 1
    quality_score: float = 0.0


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class EntryRepository(ABC):
    """Read access to dictionary entries plus keyword cache write-back"""

    @abstractmethod
    def get_entry(self, entry_id: str) -> Optional[DictionaryEntry]:
        pass

    @abstractmethod
    def search_entries(self, language: str, text: Optional[str] = None,
                       category_id: Optional[str] = None,
                       status: str = STATUS_APPROVED, limit: int = 20,
                       exclude_ids: Iterable[str] = ()) -> List[DictionaryEntry]:
        """Entries in `language` whose word contains `text` OR whose category is `category_id`"""
        pass

    @abstractmethod
    def update_entry(self, entry_id: str, **fields) -> None:
        pass


class CaseRepository(ABC):
    """Durable log of adjudicated pairs, unique per (source, target)"""

    @abstractmethod
    def find_case_by_pair(self, source_entry_id: str, target_entry_id: str) -> Optional[CaseRecord]:
        pass

    @abstractmethod
    def upsert_case(self, record: CaseRecord) -> CaseRecord:
        pass

    @abstractmethod
    def query_cases(self, query: CaseQuery) -> List[CaseRecord]:
        pass


class ConceptGroupRepository(ABC):

    @abstractmethod
    def find_or_create_concept_group(self, keyword_sets: List[Set[str]],
                                     primary: DictionaryEntry) -> str:
        """Return the id of a group sharing any keyword, creating one from `primary` otherwise"""
        pass


class TranslationRepository(ABC):

    @abstractmethod
    def get_translation(self, translation_id: str) -> Optional[Translation]:
        pass

    @abstractmethod
    def find_translation(self, source_entry_id: str, language: str,
                         translated_word: str) -> Optional[Translation]:
        pass

    @abstractmethod
    def add_translation(self, translation: Translation) -> Translation:
        pass

    @abstractmethod
    def update_translation(self, translation: Translation) -> Translation:
        pass

    @abstractmethod
    def add_vote(self, translation_id: str, user_id: str, value: int) -> int:
        """Record one vote and return the new tally; duplicates raise InvalidVoteError"""
        pass


class Store(EntryRepository, CaseRepository, ConceptGroupRepository, TranslationRepository):
    """Everything the orchestrator needs from persistence"""
    pass
