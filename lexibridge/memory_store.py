"""
LexiBridge - In-Memory Store
Dict-backed implementation of every repository interface.

Used by the test-suite and by the API when no DATABASE_URL is configured.
A single lock serializes writes so the case-pair and vote uniqueness rules
hold under the threaded development server.
"""
import threading
import uuid
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from lexibridge.base import (
    CaseQuery, CaseRecord, ConceptGroup, DictionaryEntry, Store, Translation,
    STATUS_APPROVED, make_concept_id,
)
from lexibridge.errors import InvalidVoteError, NotFoundError
from lexibridge.logging_config import get_logger

logger = get_logger('memory_store')


def new_concept_group(primary: DictionaryEntry, keywords) -> ConceptGroup:
    """Group seeded from the primary entry of a first merge"""
    return ConceptGroup(
        id=uuid.uuid4().hex,
        concept_id=make_concept_id(primary.word),
        primary_word=primary.word,
        primary_language=primary.language,
        category_id=primary.category_id,
        keywords=set(keywords),
        total_translations=2,
        quality_score=0.8,
    )


class InMemoryStore(Store):
    def __init__(self):
        self._lock = threading.RLock()
        self.entries: Dict[str, DictionaryEntry] = {}
        self.translations: Dict[str, Translation] = {}
        self.cases: Dict[Tuple[str, str], CaseRecord] = {}
        self.groups: Dict[str, ConceptGroup] = {}
        self.votes: Dict[Tuple[str, str], int] = {}
        self._write_order: Dict[Tuple[str, str], int] = {}
        self._writes = 0

    # Entries

    def add_entry(self, entry: DictionaryEntry) -> DictionaryEntry:
        with self._lock:
            self.entries[entry.id] = entry
        return entry

    def get_entry(self, entry_id):
        return self.entries.get(entry_id)

    def search_entries(self, language, text=None, category_id=None,
                       status=STATUS_APPROVED, limit=20, exclude_ids=()):
        excluded = set(exclude_ids)
        needle = text.lower() if text else None
        results = []
        for entry in self.entries.values():
            if entry.id in excluded or entry.language != language or entry.status != status:
                continue
            word_match = needle is not None and needle in entry.word.lower()
            category_match = category_id is not None and entry.category_id == category_id
            if word_match or category_match:
                results.append(entry)
            if len(results) >= limit:
                break
        return results

    def update_entry(self, entry_id, **fields):
        with self._lock:
            entry = self.entries.get(entry_id)
            if entry is None:
                raise NotFoundError(f"Entry not found: {entry_id}")
            self.entries[entry_id] = replace(entry, **fields)

    # Cases

    def find_case_by_pair(self, source_entry_id, target_entry_id):
        return self.cases.get((source_entry_id, target_entry_id))

    def upsert_case(self, record):
        with self._lock:
            existing = self.cases.get(record.pair)
            if existing is not None:
                record = replace(record, created_at=existing.created_at)
            self.cases[record.pair] = record
            self._writes += 1
            self._write_order[record.pair] = self._writes
        return record

    def query_cases(self, query: CaseQuery) -> List[CaseRecord]:
        matched = [c for c in self.cases.values() if query.matches(c)]
        matched.sort(key=lambda c: (c.decided_at, self._write_order[c.pair]), reverse=True)
        if query.limit is not None:
            matched = matched[:query.limit]
        return matched

    # Concept groups

    def find_or_create_concept_group(self, keyword_sets, primary):
        with self._lock:
            for group in self.groups.values():
                if any(group.keywords & set(keywords) for keywords in keyword_sets):
                    return group.id

            primary_keywords = keyword_sets[0] if keyword_sets else set()
            group = new_concept_group(primary, primary_keywords)
            self.groups[group.id] = group
            logger.info(f"Created concept group {group.concept_id}")
            return group.id

    # Translations

    def get_translation(self, translation_id):
        return self.translations.get(translation_id)

    def find_translation(self, source_entry_id, language, translated_word) -> Optional[Translation]:
        for translation in self.translations.values():
            if (translation.source_entry_id == source_entry_id
                    and translation.language == language
                    and translation.translated_word == translated_word):
                return translation
        return None

    def add_translation(self, translation):
        with self._lock:
            self.translations[translation.id] = translation
        return translation

    def update_translation(self, translation):
        with self._lock:
            if translation.id not in self.translations:
                raise NotFoundError(f"Translation not found: {translation.id}")
            self.translations[translation.id] = translation
        return translation

    def add_vote(self, translation_id, user_id, value):
        with self._lock:
            translation = self.translations.get(translation_id)
            if translation is None:
                raise NotFoundError(f"Translation not found: {translation_id}")
            if (translation_id, user_id) in self.votes:
                raise InvalidVoteError(f"User {user_id} already voted on {translation_id}")
            self.votes[(translation_id, user_id)] = value
            translation.votes += value
            translation.voted_by.add(user_id)
            return translation.votes
