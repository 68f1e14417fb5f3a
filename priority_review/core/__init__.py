"""
Review core - weight normalization and correction suggestion lifecycle.
No network or disk I/O happens in the weight store or the suggestion tracker.
"""

# Package initialization for review core
from .errors import (
    ReviewError,
    NotFoundError,
    DegenerateStateError,
    DuplicateApplyError,
    MutationError,
    MutationFailedError,
)
from .weights import PriorityWeight, PriorityProfile, WeightStore, normalize, is_normalized
from .profiles import default_weights, get_profile, list_profiles, PRESET_PROFILES
from .suggestions import (
    CorrectionSuggestion,
    SuggestionKey,
    SuggestionState,
    SuggestionTracker,
    ValidationErrorRef,
)
from .dataset import ReviewDataset, DatasetMutator
