"""
Diagnostic modules for ms-align.
"""

from .performance import *
from .validation import *
from .version_checker import *

__all__ = [
    'PerformanceMetrics',
    'PerformanceMonitor',
    'validate_inputs',
    'validate_configuration',
    'REQUIRED_PACKAGES',
    'check_all_packages',
    'print_version_report',
]
