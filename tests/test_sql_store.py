import pytest

from lexibridge.app import create_app
from lexibridge.base import CaseContext, CaseQuery, CaseRecord, Meaning, Translation, MERGE, SEPARATE
from lexibridge.calibration import ThresholdRegistry
from lexibridge.case_memory import CaseMemory
from lexibridge.config import AppConfig
from lexibridge.errors import DatabaseError, InvalidVoteError, NotFoundError
from lexibridge.models import db, CaseRecordModel
from lexibridge.orchestrator import MergeOrchestrator

from conftest import PHOTO_KEYWORDS, make_entry


@pytest.fixture
def app():
    app = create_app(config=AppConfig(database_url='sqlite://'), registry=ThresholdRegistry())
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def sql_store(app):
    store = app.extensions['lexibridge'].store
    store.add_entry(make_entry('fr-photo', 'photosynthèse', 'fr', 'biology',
                               PHOTO_KEYWORDS | {'glucose'}))
    store.add_entry(make_entry('es-photo', 'Fotosíntesis', 'es', 'biology', PHOTO_KEYWORDS))
    store.add_entry(make_entry('es-camera', 'fotografía', 'es', 'arts', {'camera'}))
    store.add_entry(make_entry('es-draft', 'borrador', 'es', 'biology', {'draft'}, status='pending'))
    return store


class TestSQLEntries:

    def test_store_type(self, sql_store):
        assert type(sql_store).__name__ == 'SQLStore'

    def test_round_trip(self, sql_store):
        sql_store.add_entry(make_entry('en-water', 'water', 'en', 'nature', meanings=[
            Meaning(part_of_speech='noun', definitions=['transparent liquid'])
        ], etymology='Old English'))

        entry = sql_store.get_entry('en-water')

        assert entry.meanings[0].definitions == ['transparent liquid']
        assert entry.part_of_speech() == 'noun'
        assert entry.keywords is None
        assert entry.etymology == 'Old English'

    def test_missing_entry(self, sql_store):
        assert sql_store.get_entry('nope') is None

    def test_search_word_or_category(self, sql_store):
        by_word = sql_store.search_entries('es', text='fotosín')
        assert [e.id for e in by_word] == ['es-photo']

        either = sql_store.search_entries('es', text='fotografía', category_id='biology')
        assert {e.id for e in either} == {'es-photo', 'es-camera'}

    def test_search_excludes_and_filters_status(self, sql_store):
        results = sql_store.search_entries('es', category_id='biology', exclude_ids=['es-photo'])
        assert results == []

    def test_update_entry_keywords(self, sql_store):
        sql_store.update_entry('es-camera', keywords={'camera', 'lens'})
        assert sql_store.get_entry('es-camera').keywords == {'camera', 'lens'}

    def test_update_missing_entry(self, sql_store):
        with pytest.raises(NotFoundError):
            sql_store.update_entry('nope', keywords={'x'})

    def test_read_failures_become_database_errors(self, sql_store):
        db.drop_all()

        with pytest.raises(DatabaseError):
            sql_store.get_entry('missing')
        with pytest.raises(DatabaseError):
            sql_store.search_entries('es', text='foto')
        with pytest.raises(DatabaseError):
            sql_store.query_cases(CaseQuery())
        with pytest.raises(DatabaseError):
            sql_store.find_translation('fr-photo', 'es', 'fotosíntesis')

    def test_search_text_is_literal(self, sql_store):
        assert sql_store.search_entries('es', text='f%a') == []
        assert sql_store.search_entries('es', text='fot_') == []
        assert [e.id for e in sql_store.search_entries('es', text='FOTOGRAF')] == ['es-camera']


class TestSQLCases:

    def test_upsert_keeps_single_row(self, sql_store):
        memory = CaseMemory(sql_store)
        first = memory.record_decision('a', 'b', 0.95, MERGE, 'alice',
                                       CaseContext(category_match=True, shared_keywords=frozenset({'x'})))
        second = memory.record_decision('a', 'b', 0.95, SEPARATE, 'bob', CaseContext(category_match=True))

        cases = sql_store.query_cases(CaseQuery())
        assert len(cases) == 1
        assert cases[0].human_decision == SEPARATE
        assert cases[0].validated_by == 'bob'
        assert second.created_at == first.created_at
        assert first.context.shared_keywords == frozenset({'x'})

    def test_query_filters(self, sql_store):
        memory = CaseMemory(sql_store)
        memory.record_decision('a', 'b', 0.5, MERGE, 'u', CaseContext(category_match=True))
        memory.record_decision('c', 'd', 0.55, MERGE, 'u', CaseContext(category_match=False))
        memory.record_decision('e', 'f', 0.9, MERGE, 'u', CaseContext(category_match=True))

        window = sql_store.query_cases(CaseQuery(min_score=0.4, max_score=0.6, category_match=True))
        assert [c.pair for c in window] == [('a', 'b')]
        assert len(sql_store.query_cases(CaseQuery(limit=2))) == 2

    def test_concurrent_insert_falls_back_to_update(self, app, sql_store, monkeypatch):
        lookup = sql_store._case_row
        raced = []

        def lookup_after_rival_insert(source_entry_id, target_entry_id):
            if not raced:
                raced.append(True)
                with app.app_context():
                    db.session.add(CaseRecordModel(
                        source_entry_id=source_entry_id, target_entry_id=target_entry_id,
                        similarity_score=0.4, human_decision=SEPARATE, validated_by='bob',
                    ))
                    db.session.commit()
                return None
            return lookup(source_entry_id, target_entry_id)

        monkeypatch.setattr(sql_store, '_case_row', lookup_after_rival_insert)

        saved = sql_store.upsert_case(CaseRecord(
            source_entry_id='a', target_entry_id='b', similarity_score=0.95,
            human_decision=MERGE, validated_by='alice',
        ))

        assert raced
        assert saved.human_decision == MERGE
        assert saved.validated_by == 'alice'
        assert CaseRecordModel.query.count() == 1


class TestSQLTranslations:

    def test_votes_unique_per_user(self, sql_store):
        sql_store.add_translation(Translation(id='t1', source_entry_id='fr-photo', language='es',
                                              translated_word='fotosíntesis'))

        assert sql_store.add_vote('t1', 'u1', 1) == 1
        assert sql_store.add_vote('t1', 'u2', 1) == 2
        with pytest.raises(InvalidVoteError):
            sql_store.add_vote('t1', 'u1', -1)

        translation = sql_store.get_translation('t1')
        assert translation.votes == 2
        assert translation.voted_by == {'u1', 'u2'}

    def test_tally_survives_interleaved_sessions(self, app, sql_store):
        sql_store.add_translation(Translation(id='t1', source_entry_id='fr-photo', language='es',
                                              translated_word='fotosíntesis'))
        assert sql_store.get_translation('t1').votes == 0

        with app.app_context():
            assert sql_store.add_vote('t1', 'u2', 1) == 1

        assert sql_store.add_vote('t1', 'u1', 1) == 2
        translation = sql_store.get_translation('t1')
        assert translation.votes == 2
        assert translation.voted_by == {'u1', 'u2'}

    def test_vote_on_missing_translation(self, sql_store):
        with pytest.raises(NotFoundError):
            sql_store.add_vote('nope', 'u1', 1)

    def test_find_translation(self, sql_store):
        sql_store.add_translation(Translation(id='t1', source_entry_id='fr-photo', language='es',
                                              translated_word='fotosíntesis', context=['biology']))
        found = sql_store.find_translation('fr-photo', 'es', 'fotosíntesis')
        assert found.id == 't1'
        assert found.context == ['biology']
        assert sql_store.find_translation('fr-photo', 'es', 'otra') is None

    def test_concept_group_reuse(self, sql_store):
        primary = sql_store.get_entry('fr-photo')
        first = sql_store.find_or_create_concept_group([{'sunlight'}, {'glucose'}], primary)
        second = sql_store.find_or_create_concept_group([{'other'}, {'sunlight'}], primary)
        third = sql_store.find_or_create_concept_group([{'unrelated'}], primary)

        assert first == second
        assert third != first


class TestSQLOrchestrator:

    def test_merge_and_validate(self, app, sql_store):
        orchestrator = MergeOrchestrator(sql_store, config=AppConfig(), registry=ThresholdRegistry())

        result = orchestrator.propose_translation('fr-photo', 'es', 'Fotosíntesis', 'alice')

        assert result.action == MERGE
        translation = sql_store.get_translation(result.translation_id)
        assert translation.target_entry_id == 'es-photo'
        assert translation.translation_group_id == result.group_id

        first = orchestrator.validate_translation(result.translation_id, 'merge', 'bob')
        second = orchestrator.validate_translation(result.translation_id, 'merge', 'bob')
        assert first['affected_count'] == 1
        assert second['affected_count'] == 0
        assert len(sql_store.query_cases(CaseQuery())) == 1

    def test_health_checks_database(self, app):
        response = app.test_client().get('/api/health')
        assert response.get_json()['status'] == 'ok'
        assert response.get_json()['store'] == 'SQLStore'
