"""
API scope only. Do not implement beyond this file's responsibilities.
HTTP surface for the presentation layer: weight edits, profiles, and correction review.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware

from util.logging import logger

from .schemas import (
    WeightModel,
    WeightListResponse,
    WeightUpdateRequest,
    ProfileModel,
    ProfileListResponse,
    IndexedSuggestionModel,
    SuggestionKeyRequest,
    SuggestionListResponse,
    SessionLoadRequest,
    SessionResponse,
    ApplyResponse,
    AutoFixResponse,
    DismissResponse,
    HealthResponse,
    ReviewEventModel,
    ReviewEventListResponse,
)
from ..core.config import VERSION, CORS_ORIGINS, debug_enabled
from ..core.dataset import ReviewDataset
from ..core.errors import DegenerateStateError, MutationFailedError, NotFoundError
from ..core.profiles import list_profiles
from ..core.session import ReviewSession
from ..core.weights import is_normalized


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the review session on startup, unless one was installed already."""
    if getattr(app.state, "session", None) is None:
        app.state.session = ReviewSession()
    logger.info("Priority review API started")
    yield


# Initialize the FastAPI application
app = FastAPI(
    title="Priority Review API",
    version=VERSION,
    description="Priority weight configuration and AI correction review for scheduling datasets",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None,
    lifespan=lifespan
)

# Allow the web UI to connect
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_session(request: Request) -> ReviewSession:
    return request.app.state.session


def _weights_response(weights) -> WeightListResponse:
    return WeightListResponse(
        weights=[WeightModel.from_weight(w) for w in weights],
        total=sum(w.weight for w in weights)
    )


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(session: ReviewSession = Depends(get_session)):
    """Check system health."""
    db_health = None
    if session.audit_enabled:
        from ..core.db import health_check
        db_health = health_check()

    weights = session.current_weights()
    normalized = not weights or is_normalized(weights)

    return HealthResponse(
        status="healthy" if normalized and db_health is not False else "unhealthy",
        version=VERSION,
        audit_enabled=session.audit_enabled,
        db_health=db_health,
        weights_normalized=normalized
    )


@app.get("/weights", response_model=WeightListResponse)
def list_weights_endpoint(session: ReviewSession = Depends(get_session)):
    return _weights_response(session.current_weights())


@app.put("/weights/{weight_id}", response_model=WeightListResponse)
def set_weight_endpoint(weight_id: str, req: WeightUpdateRequest, session: ReviewSession = Depends(get_session)):
    """Set one weight; all weights are renormalized."""
    try:
        weights = session.set_weight(weight_id, req.weight)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DegenerateStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _weights_response(weights)


@app.get("/profiles", response_model=ProfileListResponse)
def list_profiles_endpoint():
    return ProfileListResponse(profiles=[ProfileModel.from_profile(p) for p in list_profiles()])


@app.post("/profiles/{profile_id}/apply", response_model=WeightListResponse)
def apply_profile_endpoint(profile_id: str, session: ReviewSession = Depends(get_session)):
    try:
        weights = session.apply_profile(profile_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DegenerateStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _weights_response(weights)


@app.post("/session", response_model=SessionResponse)
def load_session_endpoint(req: SessionLoadRequest, session: ReviewSession = Depends(get_session)):
    """Load a dataset and its suggestions; starts a new review session."""
    dataset = ReviewDataset(clients=req.clients, workers=req.workers, tasks=req.tasks)
    session_id = session.load_dataset(dataset, [s.to_suggestion() for s in req.suggestions])
    return SessionResponse(session_id=session_id, suggestion_count=len(session.suggestions))


@app.get("/suggestions", response_model=SuggestionListResponse)
def list_suggestions_endpoint(include_dismissed: bool = True, session: ReviewSession = Depends(get_session)):
    active = session.indexed_active_suggestions(include_dismissed=include_dismissed)
    return SuggestionListResponse(
        suggestions=[IndexedSuggestionModel.from_indexed(i, s) for i, s in active],
        count=len(active),
        auto_fix_count=sum(1 for _, s in active if s.is_auto_fix)
    )


def _chosen_suggestion(req: SuggestionKeyRequest, session: ReviewSession):
    """Suggestion named by the request: the indexed one when given, else the key."""
    key = req.to_key()
    if req.index is None:
        return key
    suggestion = session.resolve_suggestion(req.index)
    if suggestion.key != key:
        raise NotFoundError("suggestion", f"{key.encode()} at index {req.index}")
    return suggestion


@app.post("/suggestions/apply", response_model=ApplyResponse)
async def apply_suggestion_endpoint(req: SuggestionKeyRequest, session: ReviewSession = Depends(get_session)):
    """Apply a suggestion once; repeated calls return committed=false."""
    key = req.to_key()
    try:
        committed = await session.apply_suggestion(_chosen_suggestion(req, session))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MutationFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ApplyResponse(key=key.encode(), committed=committed, state=session.tracker.state_of(key).value)


@app.post("/suggestions/apply-auto-fixes", response_model=AutoFixResponse)
async def apply_auto_fixes_endpoint(session: ReviewSession = Depends(get_session)):
    """Apply every active auto-fix suggestion; failures are reported, not raised."""
    result = await session.apply_all_auto_fixes()
    return AutoFixResponse(**result.to_dict())


@app.post("/suggestions/dismiss", response_model=DismissResponse)
def dismiss_suggestion_endpoint(req: SuggestionKeyRequest, session: ReviewSession = Depends(get_session)):
    key = req.to_key()
    try:
        dismissed = session.dismiss_suggestion(_chosen_suggestion(req, session))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return DismissResponse(key=key.encode(), dismissed=dismissed, state=session.tracker.state_of(key).value)


@app.post("/suggestions/retry", response_model=ApplyResponse)
async def retry_suggestion_endpoint(req: SuggestionKeyRequest, session: ReviewSession = Depends(get_session)):
    """Re-run a failed mutation. Successfully applied keys are never re-run."""
    key = req.to_key()
    try:
        committed = await session.retry_suggestion(_chosen_suggestion(req, session))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MutationFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ApplyResponse(key=key.encode(), committed=committed, state=session.tracker.state_of(key).value)


@app.get("/export/config")
def export_config_endpoint(session: ReviewSession = Depends(get_session)):
    return session.export_config()


@app.get("/audit/events", response_model=ReviewEventListResponse)
def list_audit_events_endpoint(limit: int = 50, session: ReviewSession = Depends(get_session)):
    """Recent audit events for the current session (debug mode only)."""
    if not debug_enabled():
        raise HTTPException(status_code=403, detail="Audit events endpoint requires debug mode")
    if not session.audit_enabled:
        raise HTTPException(status_code=404, detail="Audit trail disabled")

    from ..core.dao import list_events
    events = list_events(session.session_id, limit)
    return ReviewEventListResponse(
        session_id=session.session_id,
        events=[
            ReviewEventModel(id=e.id, ts=e.ts, action=e.action, actor=e.actor, payload=e.payload)
            for e in events
        ]
    )
