"""
Pipeline orchestration.
"""

from .main_pipeline import *
