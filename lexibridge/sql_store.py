"""
LexiBridge - SQL Store
flask_sqlalchemy implementation of the repository interfaces.

Rows are mapped to the plain dataclasses in lexibridge.base so nothing above
this layer touches SQLAlchemy. Must be used inside a Flask app context.

Uniqueness:
    case_records        unique (source_entry_id, target_entry_id); a racing
                        insert falls back to updating the winner's row
    translation_votes   unique (translation_id, user_id); a duplicate
                        becomes InvalidVoteError

Reads and writes both go through session_scope, so any SQLAlchemy failure
surfaces as DatabaseError. The vote tally is incremented in SQL.
"""
import json
import uuid
from typing import List

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError

from lexibridge.base import (
    CaseContext, CaseQuery, CaseRecord, DictionaryEntry, Meaning, Store, Translation,
    STATUS_APPROVED, make_concept_id,
)
from lexibridge.db_utils import session_scope
from lexibridge.errors import InvalidVoteError, NotFoundError
from lexibridge.logging_config import get_logger
from lexibridge.models import (
    CaseRecordModel, ConceptGroupModel, DictionaryEntryModel,
    TranslationModel, TranslationVote,
)

logger = get_logger('sql_store')


# =============================================================================
# ROW MAPPING
# =============================================================================

def entry_from_row(row: DictionaryEntryModel) -> DictionaryEntry:
    keywords = json.loads(row.keywords_json) if row.keywords_json else None
    return DictionaryEntry(
        id=row.id,
        word=row.word,
        language=row.language,
        category_id=row.category_id,
        meanings=[Meaning.from_dict(m) for m in json.loads(row.meanings_json or '[]')],
        keywords=set(keywords) if keywords else None,
        etymology=row.etymology,
        status=row.status,
    )


def entry_to_row(entry: DictionaryEntry, row=None) -> DictionaryEntryModel:
    row = row or DictionaryEntryModel(id=entry.id)
    row.word = entry.word
    row.language = entry.language
    row.category_id = entry.category_id
    row.meanings_json = json.dumps([m.to_dict() for m in entry.meanings])
    row.keywords_json = json.dumps(sorted(entry.keywords)) if entry.keywords else None
    row.etymology = entry.etymology
    row.status = entry.status
    return row


def translation_from_row(row: TranslationModel) -> Translation:
    return Translation(
        id=row.id,
        source_entry_id=row.source_entry_id,
        language=row.language,
        translated_word=row.translated_word,
        context=json.loads(row.context_json or '[]'),
        confidence=row.confidence,
        votes=row.votes or 0,
        voted_by={v.user_id for v in row.vote_rows},
        target_entry_id=row.target_entry_id,
        translation_group_id=row.translation_group_id,
        validation_type=row.validation_type,
        created_by=row.created_by,
        validated_by=row.validated_by,
        created_at=row.created_at,
    )


def case_from_row(row: CaseRecordModel) -> CaseRecord:
    return CaseRecord(
        source_entry_id=row.source_entry_id,
        target_entry_id=row.target_entry_id,
        similarity_score=row.similarity_score,
        human_decision=row.human_decision,
        validated_by=row.validated_by,
        context=CaseContext.from_dict(json.loads(row.context_json or '{}')),
        validation_type=row.validation_type,
        reason=row.reason,
        was_correct_prediction=bool(row.was_correct_prediction),
        created_at=row.created_at,
        decided_at=row.decided_at,
    )


def _fill_case_row(row: CaseRecordModel, record: CaseRecord) -> CaseRecordModel:
    row.similarity_score = record.similarity_score
    row.human_decision = record.human_decision
    row.validated_by = record.validated_by
    row.category_match = record.context.category_match
    row.context_json = json.dumps(record.context.to_dict())
    row.validation_type = record.validation_type
    row.reason = record.reason
    row.was_correct_prediction = record.was_correct_prediction
    row.decided_at = record.decided_at
    return row


class SQLStore(Store):

    # Entries

    def add_entry(self, entry: DictionaryEntry) -> DictionaryEntry:
        with session_scope() as session:
            session.add(entry_to_row(entry))
        return entry

    def get_entry(self, entry_id):
        with session_scope(commit=False) as session:
            row = session.get(DictionaryEntryModel, entry_id)
            return entry_from_row(row) if row else None

    def search_entries(self, language, text=None, category_id=None,
                       status=STATUS_APPROVED, limit=20, exclude_ids=()):
        clauses = []
        if text:
            clauses.append(DictionaryEntryModel.word.icontains(text, autoescape=True))
        if category_id is not None:
            clauses.append(DictionaryEntryModel.category_id == category_id)
        if not clauses:
            return []

        query = DictionaryEntryModel.query.filter(
            DictionaryEntryModel.language == language,
            DictionaryEntryModel.status == status,
            or_(*clauses),
        )
        excluded = list(exclude_ids)
        if excluded:
            query = query.filter(DictionaryEntryModel.id.notin_(excluded))
        with session_scope(commit=False):
            return [entry_from_row(row) for row in query.limit(limit).all()]

    def update_entry(self, entry_id, **fields):
        with session_scope() as session:
            row = session.get(DictionaryEntryModel, entry_id)
            if row is None:
                raise NotFoundError(f"Entry not found: {entry_id}")
            entry = entry_from_row(row)
            for name, value in fields.items():
                setattr(entry, name, value)
            entry_to_row(entry, row)

    # Cases

    def _case_row(self, source_entry_id, target_entry_id):
        return CaseRecordModel.query.filter_by(
            source_entry_id=source_entry_id, target_entry_id=target_entry_id
        ).first()

    def find_case_by_pair(self, source_entry_id, target_entry_id):
        with session_scope(commit=False):
            row = self._case_row(source_entry_id, target_entry_id)
            return case_from_row(row) if row else None

    def upsert_case(self, record):
        try:
            with session_scope() as session:
                row = self._case_row(record.source_entry_id, record.target_entry_id)
                if row is None:
                    row = CaseRecordModel(
                        source_entry_id=record.source_entry_id,
                        target_entry_id=record.target_entry_id,
                        created_at=record.created_at,
                    )
                    session.add(row)
                _fill_case_row(row, record)
        except IntegrityError:
            logger.info(f"Concurrent insert for case {record.pair}, updating instead")
            with session_scope():
                row = self._case_row(record.source_entry_id, record.target_entry_id)
                if row is None:
                    raise
                _fill_case_row(row, record)
        return self.find_case_by_pair(record.source_entry_id, record.target_entry_id)

    def query_cases(self, query: CaseQuery) -> List[CaseRecord]:
        q = CaseRecordModel.query
        if query.min_score is not None:
            q = q.filter(CaseRecordModel.similarity_score >= query.min_score)
        if query.max_score is not None:
            q = q.filter(CaseRecordModel.similarity_score <= query.max_score)
        if query.category_match is not None:
            q = q.filter(CaseRecordModel.category_match == query.category_match)
        q = q.order_by(CaseRecordModel.decided_at.desc(), CaseRecordModel.id.desc())
        if query.limit is not None:
            q = q.limit(query.limit)
        with session_scope(commit=False):
            return [case_from_row(row) for row in q.all()]

    # Concept groups

    def find_or_create_concept_group(self, keyword_sets, primary):
        wanted = set()
        for keywords in keyword_sets:
            wanted |= set(keywords)

        if wanted:
            with session_scope(commit=False):
                rows = ConceptGroupModel.query.all()
                for row in rows:
                    if wanted & set(json.loads(row.keywords_json or '[]')):
                        return row.id

        primary_keywords = keyword_sets[0] if keyword_sets else set()
        concept_id = make_concept_id(primary.word)
        group_id = uuid.uuid4().hex
        with session_scope() as session:
            session.add(ConceptGroupModel(
                id=group_id,
                concept_id=concept_id,
                primary_word=primary.word,
                primary_language=primary.language,
                category_id=primary.category_id,
                keywords_json=json.dumps(sorted(primary_keywords)),
                total_translations=2,
                quality_score=0.8,
            ))
        logger.info(f"Created concept group {concept_id}")
        return group_id

    # Translations

    def get_translation(self, translation_id):
        with session_scope(commit=False) as session:
            row = session.get(TranslationModel, translation_id)
            return translation_from_row(row) if row else None

    def find_translation(self, source_entry_id, language, translated_word):
        with session_scope(commit=False):
            row = TranslationModel.query.filter_by(
                source_entry_id=source_entry_id,
                language=language,
                translated_word=translated_word,
            ).first()
            return translation_from_row(row) if row else None

    def add_translation(self, translation):
        with session_scope() as session:
            session.add(TranslationModel(
                id=translation.id,
                source_entry_id=translation.source_entry_id,
                language=translation.language,
                translated_word=translation.translated_word,
                context_json=json.dumps(list(translation.context)),
                confidence=translation.confidence,
                votes=translation.votes,
                target_entry_id=translation.target_entry_id,
                translation_group_id=translation.translation_group_id,
                validation_type=translation.validation_type,
                created_by=translation.created_by,
                validated_by=translation.validated_by,
                created_at=translation.created_at,
            ))
        return translation

    def update_translation(self, translation):
        with session_scope() as session:
            row = session.get(TranslationModel, translation.id)
            if row is None:
                raise NotFoundError(f"Translation not found: {translation.id}")
            row.confidence = translation.confidence
            row.target_entry_id = translation.target_entry_id
            row.translation_group_id = translation.translation_group_id
            row.validation_type = translation.validation_type
            row.validated_by = translation.validated_by
            row.context_json = json.dumps(list(translation.context))
        return translation

    def add_vote(self, translation_id, user_id, value):
        try:
            with session_scope() as session:
                if session.get(TranslationModel, translation_id) is None:
                    raise NotFoundError(f"Translation not found: {translation_id}")
                session.add(TranslationVote(translation_id=translation_id, user_id=user_id, value=value))
                session.flush()
                session.execute(
                    update(TranslationModel)
                    .where(TranslationModel.id == translation_id)
                    .values(votes=func.coalesce(TranslationModel.votes, 0) + value)
                    .execution_options(synchronize_session=False)
                )
                new_count = session.execute(
                    select(TranslationModel.votes).where(TranslationModel.id == translation_id)
                ).scalar_one()
        except IntegrityError:
            raise InvalidVoteError(f"User {user_id} already voted on {translation_id}")
        return new_count
