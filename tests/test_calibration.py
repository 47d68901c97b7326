import json
from dataclasses import FrozenInstanceError

import pytest

from lexibridge.base import CaseContext, CaseRecord, MERGE, SEPARATE, UNCERTAIN
from lexibridge.calibration import ThresholdCalibrator, ThresholdRegistry
from lexibridge.config import ThresholdConfig


def case(score, decision, category_match=True):
    return CaseRecord(
        source_entry_id=f's{score}',
        target_entry_id=f't{score}',
        similarity_score=score,
        human_decision=decision,
        validated_by='reviewer',
        context=CaseContext(category_match=category_match),
    )


class TestThresholdCalibrator:

    @pytest.fixture
    def calibrator(self):
        return ThresholdCalibrator()

    def test_defaults_below_minimum_cases(self, calibrator):
        config = calibrator.recalibrate([case(0.95, MERGE)] * 9)

        assert config.auto_merge_threshold == 0.9
        assert config.ask_user_threshold == 0.6
        assert config.auto_separate_threshold == 0.4
        assert config.source == 'default'
        assert config.sample_size == 9

    def test_ten_cases_calibrate(self, calibrator):
        merges = [case(s, MERGE) for s in (0.92, 0.93, 0.94, 0.95, 0.96, 0.97, 0.98, 0.99)]
        separations = [case(s, SEPARATE) for s in (0.2, 0.3)]

        config = calibrator.recalibrate(merges + separations)

        # top merge score 0.99 clamped into [0.8, 0.95]
        assert config.auto_merge_threshold == pytest.approx(0.95)
        assert config.auto_separate_threshold == pytest.approx(0.3)
        assert config.ask_user_threshold == pytest.approx((0.99 + 0.3) / 2)
        assert config.source == 'calibrated'
        assert config.sample_size == 10

    def test_merge_percentile_index(self, calibrator):
        merges = [case(0.8 + i * 0.01, MERGE) for i in range(10)]

        config = calibrator.recalibrate(merges)

        # descending scores, index floor(10 * 0.1) = 1
        assert config.auto_merge_threshold == pytest.approx(0.88)

    def test_clamps_low_scores(self, calibrator):
        cases = [case(0.5, MERGE)] * 5 + [case(0.05, SEPARATE)] * 5

        config = calibrator.recalibrate(cases)

        assert config.auto_merge_threshold == pytest.approx(0.8)
        assert config.auto_separate_threshold == pytest.approx(0.1)
        assert config.ask_user_threshold == pytest.approx(0.5)

    def test_missing_decision_kind_uses_default_cut(self, calibrator):
        config = calibrator.recalibrate([case(0.7, UNCERTAIN)] * 10)

        assert config.auto_merge_threshold == pytest.approx(0.9)
        assert config.auto_separate_threshold == pytest.approx(0.4)
        assert config.ask_user_threshold == pytest.approx(0.65)


class TestThresholdRegistry:

    def test_starts_at_defaults(self):
        registry = ThresholdRegistry()
        assert registry.current().version == 0
        assert registry.current().auto_merge_threshold == 0.9

    def test_apply_bumps_version(self):
        registry = ThresholdRegistry()
        first = registry.apply(ThresholdConfig(auto_merge_threshold=0.85, source='calibrated'))
        second = registry.apply(ThresholdConfig(auto_merge_threshold=0.88, source='calibrated'))

        assert first.version == 1
        assert second.version == 2
        assert registry.current() is second

    def test_applied_snapshot_is_immutable(self):
        registry = ThresholdRegistry()
        snapshot = registry.apply(ThresholdConfig())
        with pytest.raises(FrozenInstanceError):
            snapshot.auto_merge_threshold = 0.1

    def test_save_and_load(self, tmp_path):
        path = tmp_path / 'thresholds.json'
        registry = ThresholdRegistry(path=str(path))
        registry.apply(ThresholdConfig(auto_merge_threshold=0.86, auto_separate_threshold=0.3,
                                       source='calibrated', sample_size=42))
        assert registry.save()

        saved = json.loads(path.read_text(encoding='utf-8'))
        assert saved['version'] == 1

        restored = ThresholdRegistry(path=str(path))
        loaded = restored.load()
        assert loaded.version == 1
        assert loaded.auto_merge_threshold == 0.86
        assert loaded.sample_size == 42
        assert restored.current() == loaded

    def test_load_without_file_keeps_current(self, tmp_path):
        registry = ThresholdRegistry(path=str(tmp_path / 'missing.json'))
        assert registry.load().version == 0

    def test_save_without_path(self):
        assert ThresholdRegistry().save() is False

    def test_refresh_picks_up_file_saved_elsewhere(self, tmp_path):
        path = str(tmp_path / 'thresholds.json')
        server = ThresholdRegistry(path=path)
        assert server.refresh().version == 0

        scheduled = ThresholdRegistry(path=path)
        scheduled.apply(ThresholdConfig(auto_merge_threshold=0.88, source='calibrated'))
        assert scheduled.save()

        assert server.refresh().version == 1
        assert server.current().auto_merge_threshold == 0.88

    def test_refresh_keeps_unsaved_snapshot_while_file_unchanged(self, tmp_path):
        registry = ThresholdRegistry(path=str(tmp_path / 'thresholds.json'))
        registry.apply(ThresholdConfig(auto_merge_threshold=0.88))
        registry.save()
        registry.apply(ThresholdConfig(auto_merge_threshold=0.91))

        assert registry.refresh().version == 2
        assert registry.current().auto_merge_threshold == 0.91
