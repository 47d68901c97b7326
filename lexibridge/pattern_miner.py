"""
LexiBridge - Pattern Miner
Per-feature accuracy of the static scoring bands over adjudicated cases.

Each case lands in exactly one bucket per axis:
    category:   same_category / different_category
    keywords:   high_keyword_overlap (3+) / low_keyword_overlap (1-2) / no_keyword_overlap
    similarity: high_similarity (>0.8) / medium_similarity (0.5-0.8] / low_similarity

Accuracy is the share of cases whose static prediction matched the human
decision, so it measures the heuristic's track record rather than the
learned predictor's.
"""
from collections import defaultdict


def category_bucket(case):
    return 'same_category' if case.context.category_match else 'different_category'


def keyword_bucket(case):
    shared = len(case.context.shared_keywords)
    if shared >= 3:
        return 'high_keyword_overlap'
    elif shared >= 1:
        return 'low_keyword_overlap'
    return 'no_keyword_overlap'


def similarity_bucket(case):
    if case.similarity_score > 0.8:
        return 'high_similarity'
    elif case.similarity_score > 0.5:
        return 'medium_similarity'
    return 'low_similarity'


AXES = (category_bucket, keyword_bucket, similarity_bucket)


def accuracy(cases):
    if not cases:
        return 0.0
    return sum(1 for c in cases if c.was_correct_prediction) / len(cases)


def mine_patterns(cases, min_count=5):
    """Bucket accuracy statistics, most accurate first

    Returns:
        list of {'pattern', 'accuracy', 'count'} for buckets with at least
        `min_count` cases
    """
    stats = defaultdict(lambda: {'correct': 0, 'total': 0})
    for case in cases:
        for axis in AXES:
            bucket = stats[axis(case)]
            bucket['total'] += 1
            if case.was_correct_prediction:
                bucket['correct'] += 1

    patterns = [
        {
            'pattern': name,
            'accuracy': s['correct'] / s['total'],
            'count': s['total'],
        }
        for name, s in stats.items()
        if s['total'] >= min_count
    ]
    patterns.sort(key=lambda p: p['accuracy'], reverse=True)
    return patterns


def accuracy_by_feature(cases):
    """Accuracy over same-category cases, keyword-rich cases and all cases"""
    category_cases = [c for c in cases if c.context.category_match]
    semantic_cases = [c for c in cases if len(c.context.shared_keywords) >= 2]
    return {
        'category': accuracy(category_cases),
        'semantic': accuracy(semantic_cases),
        'overall': accuracy(cases),
    }
