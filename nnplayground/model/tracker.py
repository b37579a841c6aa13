"""
Training tracker: error and timing measurements, one record per training batch.
"""
import threading
from dataclasses import dataclass, replace


@dataclass
class TrackerRecord:
    iteration: int
    training_error: float
    test_error: float
    elapsed: float = 0.0  # seconds spent in the batch


class TrainingTracker:
    """Written by the training thread, read by the UI"""

    def __init__(self):
        self._lock = threading.Lock()
        self._records = []
        self._total_time = 0.0
        self._presentations = 0

    def add_record(self, training_error, test_error):
        with self._lock:
            self._records.append(TrackerRecord(len(self._records) + 1, float(training_error), float(test_error)))

    def add_time(self, seconds):
        with self._lock:
            self._total_time += seconds
            if self._records:
                self._records[-1].elapsed = seconds

    def add_presentations(self, n):
        with self._lock:
            self._presentations += int(n)

    def get_iterations(self):
        with self._lock:
            return len(self._records)

    def get_records(self):
        with self._lock:
            return [replace(r) for r in self._records]

    def get_last_record(self):
        with self._lock:
            return replace(self._records[-1]) if self._records else None

    def get_total_time(self):
        with self._lock:
            return self._total_time

    def get_average_time(self):
        with self._lock:
            if not self._records:
                return 0.0
            return self._total_time / len(self._records)

    def get_presentations(self):
        with self._lock:
            return self._presentations

    def get_series(self, max_points=None):
        """Return (iterations, training errors, test errors), thinned to at most max_points"""
        records = self.get_records()
        if max_points and len(records) > max_points:
            stride = -(-len(records) // max_points)
            # Always keep the newest record
            records = records[::-1][::stride][::-1]
        return ([r.iteration for r in records],
                [r.training_error for r in records],
                [r.test_error for r in records])

    def reset(self):
        with self._lock:
            self._records = []
            self._total_time = 0.0
            self._presentations = 0
