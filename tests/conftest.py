import pytest

from lexibridge.base import DictionaryEntry, Meaning
from lexibridge.calibration import ThresholdRegistry
from lexibridge.case_memory import CaseMemory
from lexibridge.config import AppConfig
from lexibridge.memory_store import InMemoryStore
from lexibridge.orchestrator import MergeOrchestrator


PHOTO_KEYWORDS = {'photosynthesis', 'chlorophyll', 'sunlight', 'energy'}


def make_entry(entry_id, word, language, category_id=None, keywords=None, meanings=None,
               etymology=None, status='approved'):
    return DictionaryEntry(
        id=entry_id,
        word=word,
        language=language,
        category_id=category_id,
        meanings=meanings or [],
        keywords=set(keywords) if keywords else None,
        etymology=etymology,
        status=status,
    )


@pytest.fixture
def store():
    """Store seeded with a French source and Spanish candidates"""
    s = InMemoryStore()
    # Same concept as es-photo: score 1.0
    s.add_entry(make_entry('fr-photo', 'photosynthèse', 'fr', 'biology',
                           PHOTO_KEYWORDS | {'glucose'}))
    s.add_entry(make_entry('es-photo', 'fotosíntesis', 'es', 'biology', PHOTO_KEYWORDS))
    # Partial overlap in the same category: score 0.5 + 0.5 * 2/6
    s.add_entry(make_entry('fr-river', 'rivière', 'fr', 'geography',
                           {'river', 'water', 'stream', 'bank'}))
    s.add_entry(make_entry('es-river', 'río', 'es', 'geography',
                           {'river', 'water', 'ocean', 'wave'}))
    # Same category, no overlap: score 0.5
    s.add_entry(make_entry('fr-solar', 'solaire', 'fr', 'physics',
                           {'solaire', 'soleil', 'énergie'}))
    s.add_entry(make_entry('es-solar', 'solar', 'es', 'physics',
                           {'solar', 'sol', 'energía'}))
    # Unrelated Spanish entry reachable only by word search
    s.add_entry(make_entry('es-camera', 'fotografía', 'es', 'arts',
                           {'camera', 'picture', 'lens'}))
    return s


@pytest.fixture
def registry():
    return ThresholdRegistry()


@pytest.fixture
def orchestrator(store, registry):
    return MergeOrchestrator(store, config=AppConfig(), registry=registry)


@pytest.fixture
def memory():
    return CaseMemory(InMemoryStore())


@pytest.fixture
def water_entry():
    return make_entry(
        'en-water', 'water', 'en', 'nature',
        meanings=[Meaning(
            part_of_speech='noun',
            definitions=['A transparent liquid forming rivers and precipitation'],
            examples=['Drinking water quenches thirst quickly everywhere'],
            synonyms=['aqua'],
        )],
        etymology='From Old English waeter',
    )
