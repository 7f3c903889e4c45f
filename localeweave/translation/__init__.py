"""
Translation module

This module provides:
- Variable protection (VariableExtractor)
- Flatten/unflatten and incremental merge helpers
- Deep and Batch strategies plus the StrategySelector
- Progress tracking

The orchestrator lives in localeweave.translation.manager.
"""

from localeweave.translation.progress import ProgressTracker, TranslationProgress
from localeweave.translation.strategies import BatchStrategy, DeepStrategy, StrategySelector
from localeweave.translation.utils import flatten, merge_incremental, unflatten
from localeweave.translation.variables import VariableExtractor

__all__ = [
    'ProgressTracker',
    'TranslationProgress',
    'BatchStrategy',
    'DeepStrategy',
    'StrategySelector',
    'flatten',
    'unflatten',
    'merge_incremental',
    'VariableExtractor',
]
