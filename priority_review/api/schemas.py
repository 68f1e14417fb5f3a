"""
API scope only. Do not implement beyond this file's responsibilities.
Request/response models for the weight configuration and correction review endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Union
from datetime import datetime

from ..core.suggestions import (
    ACTIONS,
    ENTITY_TYPES,
    ERROR_TYPES,
    CorrectionSuggestion,
    SuggestionKey,
    ValidationErrorRef,
)
from ..core.weights import CATEGORIES, PriorityProfile, PriorityWeight

Scalar = Union[str, int, float, bool]


class WeightModel(BaseModel):
    id: str
    name: str
    description: str
    weight: float
    category: str
    rank: int

    @field_validator('category')
    @classmethod
    def category_must_be_valid(cls, v):
        if v not in CATEGORIES:
            raise ValueError(f'category must be one of: {list(CATEGORIES)}')
        return v

    @classmethod
    def from_weight(cls, weight: PriorityWeight) -> 'WeightModel':
        return cls(**weight.to_dict())


class WeightListResponse(BaseModel):
    weights: List[WeightModel]
    total: float


class WeightUpdateRequest(BaseModel):
    weight: float

    @field_validator('weight')
    @classmethod
    def weight_must_be_in_range(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError('weight must be between 0 and 1')
        return v


class ProfileModel(BaseModel):
    id: str
    name: str
    description: str
    weights: Dict[str, float]

    @classmethod
    def from_profile(cls, profile: PriorityProfile) -> 'ProfileModel':
        return cls(**profile.to_dict())


class ProfileListResponse(BaseModel):
    profiles: List[ProfileModel]


class ValidationErrorModel(BaseModel):
    row: int
    column: str
    entity_type: str
    message: str = ""
    type: str = "error"
    severity: int = 3

    @field_validator('row')
    @classmethod
    def row_must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError('row cannot be negative')
        return v

    @field_validator('column')
    @classmethod
    def column_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('column cannot be empty')
        return v

    @field_validator('entity_type')
    @classmethod
    def entity_type_must_be_valid(cls, v):
        if v not in ENTITY_TYPES:
            raise ValueError(f'entity_type must be one of: {list(ENTITY_TYPES)}')
        return v

    @field_validator('type')
    @classmethod
    def type_must_be_valid(cls, v):
        if v not in ERROR_TYPES:
            raise ValueError(f'type must be one of: {list(ERROR_TYPES)}')
        return v

    @field_validator('severity')
    @classmethod
    def severity_must_be_valid(cls, v):
        if not 1 <= v <= 5:
            raise ValueError('severity must be between 1 and 5')
        return v


class SuggestionModel(BaseModel):
    error: ValidationErrorModel
    suggestion: str
    reasoning: str = ""
    confidence: float
    action: str
    corrected_value: Optional[Union[Scalar, List[Scalar]]] = None

    @field_validator('confidence')
    @classmethod
    def confidence_must_be_in_range(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError('confidence must be between 0 and 1')
        return v

    @field_validator('action')
    @classmethod
    def action_must_be_valid(cls, v):
        if v not in ACTIONS:
            raise ValueError(f'action must be one of: {list(ACTIONS)}')
        return v

    def to_suggestion(self) -> CorrectionSuggestion:
        return CorrectionSuggestion(
            error=ValidationErrorRef(**self.error.model_dump()),
            suggestion=self.suggestion,
            reasoning=self.reasoning,
            confidence=self.confidence,
            action=self.action,
            corrected_value=self.corrected_value
        )

    @classmethod
    def from_suggestion(cls, suggestion: CorrectionSuggestion) -> 'SuggestionModel':
        return cls(**suggestion.to_dict())


class IndexedSuggestionModel(SuggestionModel):
    """Suggestion with its position in the loaded list, for choosing between twins."""
    index: int

    @classmethod
    def from_indexed(cls, index: int, suggestion: CorrectionSuggestion) -> 'IndexedSuggestionModel':
        return cls(index=index, **suggestion.to_dict())


class SuggestionKeyRequest(BaseModel):
    row: int
    column: str
    entity_type: str
    index: Optional[int] = None  # picks one suggestion among twins sharing the key

    @field_validator('entity_type')
    @classmethod
    def entity_type_must_be_valid(cls, v):
        if v not in ENTITY_TYPES:
            raise ValueError(f'entity_type must be one of: {list(ENTITY_TYPES)}')
        return v

    @field_validator('index')
    @classmethod
    def index_must_not_be_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError('index cannot be negative')
        return v

    def to_key(self) -> SuggestionKey:
        return SuggestionKey(self.row, self.column, self.entity_type)


class SessionLoadRequest(BaseModel):
    clients: List[Dict[str, Any]] = Field(default_factory=list)
    workers: List[Dict[str, Any]] = Field(default_factory=list)
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    suggestions: List[SuggestionModel] = Field(default_factory=list)


class SessionResponse(BaseModel):
    session_id: str
    suggestion_count: int


class SuggestionListResponse(BaseModel):
    suggestions: List[IndexedSuggestionModel]
    count: int
    auto_fix_count: int


class ApplyResponse(BaseModel):
    key: str
    committed: bool
    state: str


class AutoFixResponse(BaseModel):
    committed: List[str]
    failed: Dict[str, str]


class DismissResponse(BaseModel):
    key: str
    dismissed: bool
    state: str


class HealthResponse(BaseModel):
    status: str
    version: str
    audit_enabled: bool
    db_health: Optional[bool] = None
    weights_normalized: bool


class ReviewEventModel(BaseModel):
    id: int
    ts: datetime
    action: str
    actor: str
    payload: Dict[str, Any]


class ReviewEventListResponse(BaseModel):
    session_id: str
    events: List[ReviewEventModel]
