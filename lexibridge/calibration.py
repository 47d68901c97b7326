"""
LexiBridge - Threshold Calibration

Recomputes the auto-merge / ask-user / auto-separate thresholds from the
scores of past human decisions.

Calibration Rules (need at least 10 cases, otherwise defaults 0.9/0.6/0.4):
    auto_merge    = merge scores sorted descending, index floor(0.1 * n)
                    clamped to [0.8, 0.95]
    auto_separate = separate scores sorted ascending, index floor(0.9 * n)
                    clamped to [0.1, 0.5]
    ask_user      = midpoint of the two, clamped to [0.5, 0.8]

Percentiles rather than means keep the automatic bounds robust to a handful
of outlier decisions. Calibration never applies its result; the registry
holds whichever snapshot the caller chose to apply.
"""
import json
import math
import os
import threading
from datetime import datetime

import numpy as np

from lexibridge.base import MERGE, SEPARATE
from lexibridge.config import CalibrationConfig, ThresholdConfig, DEFAULT_THRESHOLDS
from lexibridge.logging_config import get_logger

logger = get_logger('calibration')


def _clamp(value, bounds):
    low, high = bounds
    return float(np.clip(value, low, high))


class ThresholdCalibrator:
    def __init__(self, config=None):
        self.config = config or CalibrationConfig()

    def _merge_cut(self, scores):
        if len(scores) == 0:
            return DEFAULT_THRESHOLDS.auto_merge_threshold
        ordered = np.sort(np.asarray(scores, dtype=float))[::-1]
        return float(ordered[int(math.floor(len(ordered) * self.config.merge_percentile))])

    def _separate_cut(self, scores):
        if len(scores) == 0:
            return DEFAULT_THRESHOLDS.auto_separate_threshold
        ordered = np.sort(np.asarray(scores, dtype=float))
        index = min(int(math.floor(len(ordered) * self.config.separate_percentile)), len(ordered) - 1)
        return float(ordered[index])

    def recalibrate(self, cases):
        """Derive a ThresholdConfig from adjudicated cases"""
        if len(cases) < self.config.min_cases:
            logger.debug(f"Only {len(cases)} cases, keeping default thresholds")
            return ThresholdConfig(sample_size=len(cases), computed_at=datetime.now())

        merge_scores = [c.similarity_score for c in cases if c.human_decision == MERGE]
        separate_scores = [c.similarity_score for c in cases if c.human_decision == SEPARATE]

        auto_merge = self._merge_cut(merge_scores)
        auto_separate = self._separate_cut(separate_scores)
        ask_user = (auto_merge + auto_separate) / 2

        config = ThresholdConfig(
            auto_merge_threshold=_clamp(auto_merge, self.config.auto_merge_bounds),
            ask_user_threshold=_clamp(ask_user, self.config.ask_user_bounds),
            auto_separate_threshold=_clamp(auto_separate, self.config.auto_separate_bounds),
            sample_size=len(cases),
            source='calibrated',
            computed_at=datetime.now(),
        )
        logger.info(
            f"Calibrated thresholds from {len(cases)} cases: "
            f"merge>{config.auto_merge_threshold:.3f} "
            f"ask>{config.ask_user_threshold:.3f} "
            f"separate<={config.auto_separate_threshold:.3f}"
        )
        return config


class ThresholdRegistry:
    """Current ThresholdConfig snapshot, replaced whole on apply

    The snapshot can be mirrored to a JSON file. refresh() reloads it when
    another process (the recalibration script) has written a newer file.
    """

    def __init__(self, initial=None, path=None):
        self._lock = threading.Lock()
        self._current = initial or DEFAULT_THRESHOLDS
        self._file_mtime = None
        self.path = path

    def current(self):
        return self._current

    def apply(self, config):
        """Swap in `config` stamped with the next version and return it"""
        with self._lock:
            snapshot = config.with_version(self._current.version + 1)
            self._current = snapshot
        logger.info(f"Applied thresholds version {snapshot.version} ({snapshot.source})")
        return snapshot

    def _mtime(self):
        try:
            return os.stat(self.path).st_mtime_ns
        except OSError:
            return None

    def load(self):
        """Load the last saved snapshot, keeping the current one if none exists"""
        if not self.path or not os.path.exists(self.path):
            return self._current
        mtime = self._mtime()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                snapshot = ThresholdConfig.from_dict(json.load(f))
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.error(f"Error loading thresholds from {self.path}: {e}")
            return self._current
        with self._lock:
            self._current = snapshot
            self._file_mtime = mtime
        return snapshot

    def refresh(self):
        """Reload the file if it changed since this registry last read or wrote it"""
        if not self.path:
            return self._current
        mtime = self._mtime()
        if mtime is None or mtime == self._file_mtime:
            return self._current
        snapshot = self.load()
        logger.info(f"Reloaded thresholds version {snapshot.version} from {self.path}")
        return snapshot

    def save(self):
        """Write the current snapshot to the configured JSON file"""
        if not self.path:
            return False
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self._current.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving thresholds to {self.path}: {e}")
            return False
        self._file_mtime = self._mtime()
        return True
