"""
Performance monitoring for mapping runs.
"""

import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import psutil

@dataclass
class PerformanceMetrics:
    """Performance metrics container."""
    start_time: float
    end_time: Optional[float] = None
    peak_memory_mb: float = 0.0
    counters: Dict[str, int] = field(default_factory=dict)

    @property
    def total_time(self) -> float:
        """Total execution time in seconds."""
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time

class PerformanceMonitor:
    """Sample CPU and resident memory in a background thread."""

    def __init__(self, sampling_interval: float = 1.0):
        """
        Initialize performance monitor.

        Args:
            sampling_interval: Time between samples in seconds
        """
        self.sampling_interval = sampling_interval
        self.metrics = PerformanceMetrics(start_time=time.time())
        self.monitoring = False
        self.thread = None
        self.cpu_samples: List[float] = []
        self.memory_samples: List[float] = []
        self._stop_event = threading.Event()

    def start(self):
        """Start performance monitoring."""
        self.metrics = PerformanceMetrics(start_time=time.time())
        self.cpu_samples = []
        self.memory_samples = []
        self._stop_event.clear()
        self.monitoring = True
        self.thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self.thread.start()

    def stop(self):
        """Stop performance monitoring."""
        self.monitoring = False
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=2.0)
        self.metrics.end_time = time.time()

        # One final sample so short runs still report memory
        self.memory_samples.append(psutil.Process().memory_info().rss / (1024 * 1024))
        self.metrics.peak_memory_mb = max(self.memory_samples)

    def _monitor_loop(self):
        """Background monitoring loop."""
        process = psutil.Process()

        while self.monitoring:
            try:
                self.cpu_samples.append(process.cpu_percent(interval=None))
                self.memory_samples.append(process.memory_info().rss / (1024 * 1024))
            except psutil.NoSuchProcess:
                break
            self._stop_event.wait(self.sampling_interval)

    def count(self, name: str, value: int = 1):
        """Add to a named work counter, e.g. queries or aligned runs."""
        self.metrics.counters[name] = self.metrics.counters.get(name, 0) + value

    def get_report(self) -> Dict:
        """Timing, memory and work counters of the monitored run."""
        elapsed = self.metrics.total_time
        report = {
            'total_time_seconds': elapsed,
            'peak_memory_mb': self.metrics.peak_memory_mb,
            'mean_cpu_percent': sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0.0,
            'started': datetime.fromtimestamp(self.metrics.start_time).isoformat(),
            'finished': datetime.fromtimestamp(self.metrics.end_time).isoformat() if self.metrics.end_time else None,
            'counters': dict(self.metrics.counters),
            'memory_samples': len(self.memory_samples),
            'host': {
                'cpu_count': psutil.cpu_count(),
                'total_memory_mb': psutil.virtual_memory().total / (1024 * 1024),
            },
        }

        # Rates need a nonzero duration
        if elapsed > 0:
            report['per_second'] = {
                name: value / elapsed for name, value in self.metrics.counters.items()
            }

        return report

    def save_report(self, filepath: Union[str, Path]) -> str:
        """Write get_report() as JSON and return the path."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.get_report(), f, indent=2)
        return str(path)

__all__ = [
    'PerformanceMetrics',
    'PerformanceMonitor',
]
