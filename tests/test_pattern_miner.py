import pytest

from lexibridge.base import CaseContext, CaseRecord, MERGE, SEPARATE
from lexibridge.pattern_miner import (
    accuracy, accuracy_by_feature, category_bucket, keyword_bucket, mine_patterns,
    similarity_bucket,
)


def case(score, correct, category_match=True, shared=()):
    return CaseRecord(
        source_entry_id='s',
        target_entry_id='t',
        similarity_score=score,
        human_decision=MERGE if correct else SEPARATE,
        validated_by='reviewer',
        context=CaseContext(category_match=category_match, shared_keywords=frozenset(shared)),
        was_correct_prediction=correct,
    )


class TestBuckets:

    def test_each_case_lands_in_one_bucket_per_axis(self):
        c = case(0.85, True, shared=('a', 'b', 'c'))
        assert category_bucket(c) == 'same_category'
        assert keyword_bucket(c) == 'high_keyword_overlap'
        assert similarity_bucket(c) == 'high_similarity'

    @pytest.mark.parametrize('score,bucket', [
        (0.81, 'high_similarity'),
        (0.8, 'medium_similarity'),
        (0.51, 'medium_similarity'),
        (0.5, 'low_similarity'),
    ])
    def test_similarity_boundaries(self, score, bucket):
        assert similarity_bucket(case(score, True)) == bucket

    def test_keyword_overlap_levels(self):
        assert keyword_bucket(case(0.5, True, shared=('a',))) == 'low_keyword_overlap'
        assert keyword_bucket(case(0.5, True)) == 'no_keyword_overlap'


class TestMinePatterns:

    def test_counts_and_accuracy(self):
        cases = (
            [case(0.95, True, shared=('a', 'b', 'c'))] * 5
            + [case(0.3, False, category_match=False)] * 4
            + [case(0.3, True, category_match=False)]
        )

        patterns = {p['pattern']: p for p in mine_patterns(cases)}

        assert patterns['same_category'] == {'pattern': 'same_category', 'accuracy': 1.0, 'count': 5}
        assert patterns['different_category']['accuracy'] == pytest.approx(0.2)
        assert patterns['low_similarity']['count'] == 5
        assert patterns['no_keyword_overlap']['count'] == 5

    def test_min_count_filters_small_buckets(self):
        cases = [case(0.95, True)] * 4 + [case(0.3, True, category_match=False)] * 5
        names = [p['pattern'] for p in mine_patterns(cases)]
        assert 'same_category' not in names
        assert 'different_category' in names

    def test_sorted_by_accuracy(self):
        cases = [case(0.95, True)] * 5 + [case(0.3, False, category_match=False)] * 5
        accuracies = [p['accuracy'] for p in mine_patterns(cases)]
        assert accuracies == sorted(accuracies, reverse=True)

    def test_empty(self):
        assert mine_patterns([]) == []


class TestAccuracyByFeature:

    def test_feature_subsets(self):
        cases = [
            case(0.95, True, shared=('a', 'b')),
            case(0.7, False, shared=('a',)),
            case(0.3, True, category_match=False),
            case(0.3, False, category_match=False, shared=('a', 'b', 'c')),
        ]
        result = accuracy_by_feature(cases)
        assert result['category'] == pytest.approx(0.5)
        assert result['semantic'] == pytest.approx(0.5)
        assert result['overall'] == pytest.approx(0.5)

    def test_accuracy_of_nothing_is_zero(self):
        assert accuracy([]) == 0.0
