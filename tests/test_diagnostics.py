import json
import time

import pytest

from ms_align.diagnostics.performance import PerformanceMonitor
from ms_align.diagnostics.version_checker import check_package, REQUIRED_PACKAGES

def test_performance_monitor_report(tmp_path):
    monitor = PerformanceMonitor(sampling_interval=0.01)
    monitor.start()
    monitor.count('queries', 3)
    monitor.count('queries')
    monitor.count('runs', 2)
    time.sleep(0.05)
    monitor.stop()

    report = monitor.get_report()
    assert report['total_time_seconds'] > 0
    assert report['peak_memory_mb'] > 0
    assert report['finished'] is not None
    assert report['memory_samples'] >= 1
    assert report['counters'] == {'queries': 4, 'runs': 2}
    assert report['per_second']['queries'] == pytest.approx(4 / report['total_time_seconds'])

    path = monitor.save_report(tmp_path / "logs" / "perf.json")
    with open(path) as f:
        assert json.load(f)['counters'] == {'queries': 4, 'runs': 2}

def test_counters_reset_on_start():
    monitor = PerformanceMonitor(sampling_interval=0.01)
    monitor.count('runs', 5)
    monitor.start()
    monitor.stop()
    assert monitor.get_report()['counters'] == {}

def test_required_packages_are_installed():
    for name, min_version in REQUIRED_PACKAGES.items():
        ok, installed, _ = check_package(name, min_version)
        assert installed != "Not installed", name

def test_check_package_missing():
    ok, installed, required = check_package("surely-not-a-real-package-name", "1.0")
    assert not ok
    assert installed == "Not installed"
    assert required == "1.0"
