"""
Review session scope only. Do not implement beyond this file's responsibilities.
Session controller - owns the weight store, the suggestion tracker and the dataset
for one review session, and records each command to the audit trail.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from util.logging import logger

from .config import is_audit_enabled
from .dataset import DatasetMutator, ReviewDataset
from .errors import MutationFailedError, NotFoundError
from .profiles import default_weights, get_profile
from .suggestions import CorrectionSuggestion, SuggestionKey, SuggestionTracker, find_by_key
from .weights import PriorityProfile, PriorityWeight, WeightStore

OPTIMIZATION_OBJECTIVES = {
    'fulfillment': 'maximize_task_completion',
    'fairness': 'balance_workload_distribution',
    'efficiency': 'optimize_resource_utilization',
    'quality': 'maximize_skill_match_quality',
}

# Index into the loaded suggestion list, identity key, or the suggestion itself
SuggestionTarget = Union[int, SuggestionKey, CorrectionSuggestion]


@dataclass
class AutoFixResult:
    """Outcome of a batch auto-fix run."""
    committed: List[SuggestionKey] = field(default_factory=list)
    failed: Dict[SuggestionKey, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "committed": [key.encode() for key in self.committed],
            "failed": {key.encode(): error for key, error in self.failed.items()}
        }


class ReviewSession:
    """Single owner of weight and suggestion state for the presentation layer.

    Weights survive dataset reloads; the suggestion tracker does not.
    """

    def __init__(self, weights: Optional[WeightStore] = None,
                 defaults: Optional[Iterable[PriorityWeight]] = None,
                 audit: Optional[bool] = None):
        self.weights = weights if weights is not None else WeightStore()
        self.weights.initialize(default_weights() if defaults is None else defaults)

        self.audit_enabled = is_audit_enabled() if audit is None else audit
        if self.audit_enabled:
            from .db import init_db
            init_db()

        self.dataset = ReviewDataset()
        self.suggestions: List[CorrectionSuggestion] = []
        self.tracker = SuggestionTracker()
        self.session_id = str(uuid.uuid4())

    # Dataset / session lifecycle

    def load_dataset(self, dataset: ReviewDataset, suggestions: Iterable[CorrectionSuggestion]) -> str:
        """Start a new review session over a freshly loaded dataset."""
        self.dataset = dataset
        self.suggestions = list(suggestions)
        self.tracker = SuggestionTracker()
        self.session_id = str(uuid.uuid4())

        logger.log_operation("session.load", "success", {
            "session_id": self.session_id,
            "suggestions": len(self.suggestions)
        })
        self._record("session_started", {
            "clients": len(dataset.clients),
            "workers": len(dataset.workers),
            "tasks": len(dataset.tasks),
            "suggestions": len(self.suggestions)
        })
        return self.session_id

    # Weights

    def current_weights(self) -> List[PriorityWeight]:
        return self.weights.current_weights()

    def set_weight(self, weight_id: str, value: float) -> List[PriorityWeight]:
        result = self.weights.set_weight(weight_id, value)
        self._record("weight_changed", {"weight_id": weight_id, "requested": value})
        return result

    def apply_profile(self, profile: Union[str, PriorityProfile]) -> List[PriorityWeight]:
        if isinstance(profile, str):
            profile = get_profile(profile)
        result = self.weights.apply_profile(profile)
        self._record("profile_applied", {"profile_id": profile.id})
        return result

    # Suggestions

    def active_suggestions(self, include_dismissed: bool = True) -> List[CorrectionSuggestion]:
        return self.tracker.active_suggestions(self.suggestions, include_dismissed=include_dismissed)

    def indexed_active_suggestions(self, include_dismissed: bool = True) -> List[Tuple[int, CorrectionSuggestion]]:
        """Active suggestions paired with their position in the loaded list."""
        active = {id(s) for s in self.active_suggestions(include_dismissed)}
        return [(i, s) for i, s in enumerate(self.suggestions) if id(s) in active]

    def find_suggestion(self, key: SuggestionKey) -> CorrectionSuggestion:
        suggestion = find_by_key(self.suggestions, key)
        if suggestion is None:
            raise NotFoundError("suggestion", key.encode())
        return suggestion

    def resolve_suggestion(self, target: SuggestionTarget) -> CorrectionSuggestion:
        """Resolve an index into the loaded list, a key, or a suggestion itself.

        An index selects that exact suggestion, so one of several twins
        sharing a key can be chosen. A key resolves to the first twin.
        """
        if isinstance(target, CorrectionSuggestion):
            return target
        if isinstance(target, SuggestionKey):
            return self.find_suggestion(target)
        if isinstance(target, int) and not isinstance(target, bool):
            if not 0 <= target < len(self.suggestions):
                raise NotFoundError("suggestion", str(target))
            return self.suggestions[target]
        raise TypeError(f"Cannot resolve suggestion from {type(target).__name__}")

    async def apply_suggestion(self, target: SuggestionTarget) -> bool:
        suggestion = self.resolve_suggestion(target)

        try:
            committed = await self.tracker.apply_suggestion(suggestion, DatasetMutator(self.dataset))
        except MutationFailedError as e:
            self._record("suggestion_apply_failed", {"key": suggestion.key.encode(), "error": str(e.cause)})
            raise

        if committed:
            self._record("suggestion_applied", {
                "key": suggestion.key.encode(),
                "corrected_value": suggestion.corrected_value
            })
        return committed

    async def apply_all_auto_fixes(self) -> AutoFixResult:
        """Apply every active auto-fix suggestion, one mutation per key.

        Twins of a key applied earlier in the batch are skipped by the
        tracker. A failed mutation is collected and the batch continues.
        """
        result = AutoFixResult()
        for suggestion in self.active_suggestions(include_dismissed=False):
            if not suggestion.is_auto_fix:
                continue
            key = suggestion.key
            try:
                committed = await self.apply_suggestion(suggestion)
            except MutationFailedError as e:
                result.failed[key] = str(e.cause)
                continue
            if committed:
                result.committed.append(key)

        logger.log_operation("suggestions.apply_auto_fixes", "success" if not result.failed else "partial", {
            "committed": len(result.committed),
            "failed": len(result.failed)
        })
        return result

    def dismiss_suggestion(self, target: SuggestionTarget) -> bool:
        suggestion = self.resolve_suggestion(target)

        dismissed = self.tracker.dismiss_suggestion(suggestion)
        if dismissed:
            self._record("suggestion_dismissed", {"key": suggestion.key.encode()})
        return dismissed

    async def retry_suggestion(self, target: SuggestionTarget) -> bool:
        suggestion = self.resolve_suggestion(target)

        retried = await self.tracker.retry_suggestion(suggestion, DatasetMutator(self.dataset))
        if retried:
            self._record("suggestion_retried", {"key": suggestion.key.encode()})
        return retried

    # Export

    def export_config(self) -> Dict[str, Any]:
        """Weight section of the exported scheduling configuration."""
        weights = self.weights.current_weights()
        by_id = {w.id: w for w in weights}
        top = self.weights.top_priority()

        def share(weight_id: str) -> float:
            entry = by_id.get(weight_id)
            return entry.weight if entry else 0

        return {
            'priorityWeights': {w.id: w.to_dict() for w in weights},
            'allocationSettings': {
                'optimizationObjective': OPTIMIZATION_OBJECTIVES.get(
                    top.category if top else None, 'balanced_optimization'
                ),
                'preferences': {
                    'balanceWorkload': share('worker_fairness'),
                    'prioritizeQuality': share('skill_matching'),
                    'maximizeEfficiency': share('phase_efficiency')
                }
            }
        }

    def _record(self, action: str, payload: Dict[str, Any]):
        if not self.audit_enabled:
            return
        from .dao import add_event
        add_event(session_id=self.session_id, actor="review_session", action=action, payload=payload)
