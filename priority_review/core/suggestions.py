"""
Correction review scope only. Do not implement beyond this file's responsibilities.
Suggestion lifecycle - tracks which correction suggestions were applied or dismissed
so that no logical correction is offered again or applied twice.
"""

import inspect
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Union

from util.logging import logger

from .errors import DuplicateApplyError, MutationFailedError

ENTITY_TYPES = ("client", "worker", "task")
ACTIONS = ("auto-fix", "review-needed")
ERROR_TYPES = ("error", "warning", "critical")

Scalar = Union[str, int, float, bool]
CorrectedValue = Union[Scalar, List[Scalar], None]


@dataclass(frozen=True)
class ValidationErrorRef:
    """The validation error a suggestion targets."""
    row: int
    column: str
    entity_type: str  # client, worker, task
    message: str = ""
    type: str = "error"  # error, warning, critical
    severity: int = 3

    def __post_init__(self):
        if self.entity_type not in ENTITY_TYPES:
            raise ValueError(f"Invalid entity_type: {self.entity_type}")
        if self.type not in ERROR_TYPES:
            raise ValueError(f"Invalid error type: {self.type}")
        if self.row < 0:
            raise ValueError(f"row must be >= 0, got {self.row}")


@dataclass(frozen=True)
class SuggestionKey:
    """Identity of the correction target, independent of suggestion content."""
    row: int
    column: str
    entity_type: str

    @classmethod
    def of(cls, suggestion: 'CorrectionSuggestion') -> 'SuggestionKey':
        error = suggestion.error
        return cls(error.row, error.column, error.entity_type)

    def encode(self) -> str:
        return f"{self.row}-{self.column}-{self.entity_type}"

    def __str__(self):
        return self.encode()


@dataclass
class CorrectionSuggestion:
    error: ValidationErrorRef
    suggestion: str
    reasoning: str
    confidence: float
    action: str  # auto-fix, review-needed
    corrected_value: CorrectedValue = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.action not in ACTIONS:
            raise ValueError(f"Invalid action: {self.action}")

    @property
    def key(self) -> SuggestionKey:
        return SuggestionKey.of(self)

    @property
    def is_auto_fix(self) -> bool:
        return self.action == "auto-fix"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CorrectionSuggestion':
        error = data['error']
        return cls(
            error=ValidationErrorRef(
                row=int(error['row']),
                column=error['column'],
                entity_type=error.get('entity_type', error.get('entityType')),
                message=error.get('message', ''),
                type=error.get('type', 'error'),
                severity=int(error.get('severity', 3))
            ),
            suggestion=data.get('suggestion', ''),
            reasoning=data.get('reasoning', ''),
            confidence=float(data.get('confidence', 0.0)),
            action=data.get('action', 'review-needed'),
            corrected_value=data.get('corrected_value', data.get('correctedValue'))
        )


class SuggestionState(str, Enum):
    PENDING = "pending"
    APPLYING = "applying"
    APPLIED = "applied"
    DISMISSED = "dismissed"


# Data-mutation collaborator: receives the applied suggestion, may be sync or async
Mutator = Callable[[CorrectionSuggestion], Any]


async def _invoke(mutator: Mutator, suggestion: CorrectionSuggestion):
    result = mutator(suggestion)
    if inspect.isawaitable(result):
        result = await result
    return result


class SuggestionTracker:
    """Per-session record of acted-on suggestion keys.

    States per key: pending -> applying -> applied, or pending -> dismissed.
    Applied and dismissed are terminal. A key is marked applied before the
    mutator is awaited, so a duplicate call made while the mutation is still
    running is ignored, and a failed mutation does not make the key
    applicable again (at most once). Failed keys can only be re-driven
    explicitly through retry_suggestion.
    """

    def __init__(self):
        self._applied: Set[SuggestionKey] = set()
        self._dismissed: Set[SuggestionKey] = set()
        self._in_flight: Set[SuggestionKey] = set()
        self._failed: Dict[SuggestionKey, str] = {}

    def state_of(self, key: SuggestionKey) -> SuggestionState:
        if key in self._in_flight:
            return SuggestionState.APPLYING
        if key in self._applied:
            return SuggestionState.APPLIED
        if key in self._dismissed:
            return SuggestionState.DISMISSED
        return SuggestionState.PENDING

    def is_resolved(self, key: SuggestionKey) -> bool:
        return key in self._applied or key in self._dismissed

    def active_suggestions(self, suggestions: Iterable[CorrectionSuggestion],
                           include_dismissed: bool = True) -> List[CorrectionSuggestion]:
        """Filter out applied (and in-flight) suggestions, keeping input order.

        Dismissed suggestions stay in the list unless include_dismissed is False.
        """
        active = []
        for suggestion in suggestions:
            key = SuggestionKey.of(suggestion)
            if key in self._applied:
                continue
            if not include_dismissed and key in self._dismissed:
                continue
            active.append(suggestion)
        return active

    async def apply_suggestion(self, suggestion: CorrectionSuggestion,
                               mutator: Optional[Mutator] = None) -> bool:
        """Apply a suggestion at most once.

        Returns False without touching the mutator when the key is already
        applied, dismissed or in flight. Raises MutationFailedError if the
        mutator fails; the key stays applied.
        """
        key = SuggestionKey.of(suggestion)
        if self.is_resolved(key):
            logger.log_suggestion_event("apply", key.encode(), "ignored", {"state": self.state_of(key).value})
            return False

        self._applied.add(key)
        self._in_flight.add(key)
        try:
            if mutator is not None:
                await _invoke(mutator, suggestion)
        except Exception as e:
            self._failed[key] = str(e)
            logger.log_mutation_failure(key.encode(), e)
            raise MutationFailedError(key, e) from e
        finally:
            self._in_flight.discard(key)

        logger.log_suggestion_event("apply", key.encode(), "success", {
            "action": suggestion.action,
            "confidence": suggestion.confidence
        })
        return True

    async def require_apply(self, suggestion: CorrectionSuggestion,
                            mutator: Optional[Mutator] = None) -> None:
        """Strict variant of apply_suggestion that raises on a duplicate."""
        committed = await self.apply_suggestion(suggestion, mutator)
        if not committed:
            raise DuplicateApplyError(SuggestionKey.of(suggestion))

    def dismiss_suggestion(self, suggestion: CorrectionSuggestion) -> bool:
        """Mark a suggestion dismissed. No downstream signal."""
        key = SuggestionKey.of(suggestion)
        if key in self._applied:
            return False

        self._dismissed.add(key)
        logger.log_suggestion_event("dismiss", key.encode(), "success")
        return True

    async def retry_suggestion(self, suggestion: CorrectionSuggestion, mutator: Mutator) -> bool:
        """Re-run the mutator for a key whose earlier mutation failed.

        Keys that were applied successfully, never applied, or are in flight
        are left alone and False is returned.
        """
        key = SuggestionKey.of(suggestion)
        if key not in self._failed or key in self._in_flight:
            return False

        self._in_flight.add(key)
        try:
            await _invoke(mutator, suggestion)
        except Exception as e:
            self._failed[key] = str(e)
            logger.log_mutation_failure(key.encode(), e)
            raise MutationFailedError(key, e) from e
        finally:
            self._in_flight.discard(key)

        del self._failed[key]
        logger.log_suggestion_event("retry", key.encode(), "success")
        return True

    def failed_keys(self) -> Dict[SuggestionKey, str]:
        return dict(self._failed)

    def applied_keys(self) -> Set[SuggestionKey]:
        return set(self._applied)

    def dismissed_keys(self) -> Set[SuggestionKey]:
        return set(self._dismissed)


def find_by_key(suggestions: Sequence[CorrectionSuggestion],
                key: SuggestionKey) -> Optional[CorrectionSuggestion]:
    """First suggestion in the list with the given key."""
    for suggestion in suggestions:
        if SuggestionKey.of(suggestion) == key:
            return suggestion
    return None
