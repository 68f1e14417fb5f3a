"""
Weight configuration scope only. Do not implement beyond this file's responsibilities.
Priority weights - keeps a set of named scoring weights normalized to a total of 1.0.
"""

import math
from dataclasses import dataclass, asdict, replace, field
from typing import Dict, Iterable, List, Optional

from util.logging import logger

from .config import get_weight_tolerance
from .errors import NotFoundError, DegenerateStateError

CATEGORIES = ("fulfillment", "fairness", "efficiency", "quality")


@dataclass
class PriorityWeight:
    id: str
    name: str
    description: str
    weight: float
    category: str  # fulfillment, fairness, efficiency, quality
    rank: int

    def to_dict(self) -> Dict:
        """Convert to dictionary for export."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'PriorityWeight':
        """Create from dictionary, rejecting unknown categories."""
        if data.get('category') not in CATEGORIES:
            raise ValueError(f"Invalid category: {data.get('category')}")
        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            description=data.get('description', ''),
            weight=float(data['weight']),
            category=data['category'],
            rank=int(data.get('rank', 0))
        )


@dataclass(frozen=True)
class PriorityProfile:
    """Named bundle of target weights. Need not cover every id or sum to 1.0."""
    id: str
    name: str
    description: str
    weights: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'weights': dict(self.weights)
        }


def normalize(values: List[float], tolerance: Optional[float] = None) -> List[float]:
    """Divide every value by the total of all values.

    Raises DegenerateStateError when the total is zero (within tolerance) or
    not finite, so no NaN or infinite weight is ever produced.
    """
    if tolerance is None:
        tolerance = get_weight_tolerance()

    total = math.fsum(values)
    if not math.isfinite(total) or abs(total) <= tolerance:
        raise DegenerateStateError(f"Cannot normalize weights summing to {total}")

    return [value / total for value in values]


def is_normalized(weights: Iterable[PriorityWeight], tolerance: Optional[float] = None) -> bool:
    """Check the sum-to-one invariant."""
    if tolerance is None:
        tolerance = get_weight_tolerance()
    return abs(math.fsum(w.weight for w in weights) - 1.0) <= tolerance


class WeightStore:
    """Owns an ordered set of priority weights.

    Every successful mutation re-derives each weight from the full set
    (weight / total), so the entries always sum to 1.0. Failed mutations
    leave the previous weights untouched.
    """

    def __init__(self, tolerance: Optional[float] = None):
        self._weights: List[PriorityWeight] = []
        self._tolerance = tolerance

    def __len__(self) -> int:
        return len(self._weights)

    @property
    def is_empty(self) -> bool:
        return not self._weights

    def initialize(self, defaults: Iterable[PriorityWeight]) -> List[PriorityWeight]:
        """Set defaults only if nothing is configured yet.

        Defaults are taken as given; they are expected to already sum to 1.0.
        """
        if self._weights:
            return self.current_weights()

        self._weights = [replace(w) for w in defaults]
        logger.log_operation("weights.initialize", "success", {"count": len(self._weights)})
        return self.current_weights()

    def set_weight(self, weight_id: str, value: float) -> List[PriorityWeight]:
        """Replace one weight, then renormalize all of them."""
        index = self._index_of(weight_id)
        values = [w.weight for w in self._weights]
        values[index] = value

        self._commit(values)
        logger.log_weight_change(weight_id, value, self._weights[index].weight)
        return self.current_weights()

    def apply_profile(self, profile: PriorityProfile) -> List[PriorityWeight]:
        """Take profile targets for known ids, keep current values for the rest, renormalize.

        Profile ids with no matching entry are ignored.
        """
        values = [profile.weights.get(w.id, w.weight) for w in self._weights]
        matched = sum(1 for w in self._weights if w.id in profile.weights)

        self._commit(values)
        logger.log_profile_applied(profile.id, matched, len(profile.weights) - matched)
        return self.current_weights()

    def current_weights(self) -> List[PriorityWeight]:
        """Return copies of the entries in insertion order."""
        return [replace(w) for w in self._weights]

    def weight_map(self) -> Dict[str, float]:
        return {w.id: w.weight for w in self._weights}

    def top_priority(self) -> Optional[PriorityWeight]:
        """Entry with the largest weight, first one on ties."""
        if not self._weights:
            return None
        top = self._weights[0]
        for w in self._weights[1:]:
            if w.weight > top.weight:
                top = w
        return replace(top)

    def _index_of(self, weight_id: str) -> int:
        for i, w in enumerate(self._weights):
            if w.id == weight_id:
                return i
        raise NotFoundError("weight", weight_id)

    def _commit(self, values: List[float]):
        normalized = normalize(values, self._tolerance)
        self._weights = [replace(w, weight=v) for w, v in zip(self._weights, normalized)]
