"""REST API router."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from eventflow.api.deps import get_engine
from eventflow.api.schemas import (
    AuditLogResponse,
    CreateEventRequest,
    GenerateRecommendationsRequest,
    HealthResponse,
    RecommendationResponse,
    TransitionCheckResponse,
    TransitionRequest,
    WorkflowResponse,
)
from eventflow.engine import (
    BusinessRuleViolation,
    EventFlowError,
    EventNotFound,
    InvalidStateTransition,
    PlanningEngine,
)
from eventflow.models import AggregatedPreferences, Event, GeoPoint

router = APIRouter(prefix="/v1")


def _http_error(e: EventFlowError) -> HTTPException:
    """Map an engine error to its HTTP status."""
    if isinstance(e, EventNotFound):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, InvalidStateTransition):
        return HTTPException(
            status_code=409,
            detail={
                "code": e.code,
                "message": e.message,
                "current_status": e.current_status,
                "requested_status": e.requested_status,
                "guard": e.guard,
            },
        )
    if isinstance(e, BusinessRuleViolation):
        return HTTPException(
            status_code=422,
            detail={"code": e.code, "rule_id": e.rule_id.value, "message": e.message},
        )
    return HTTPException(status_code=400, detail=e.message)


def _to_point(request: GenerateRecommendationsRequest | None) -> GeoPoint | None:
    if request is None or request.location is None:
        return None
    return GeoPoint(latitude=request.location.latitude, longitude=request.location.longitude)


# ============================================================================
# Health
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version="0.1.0")


# ============================================================================
# Events & lifecycle
# ============================================================================


@router.post("/events", response_model=Event, status_code=201)
async def create_event(
    request: CreateEventRequest,
    engine: PlanningEngine = Depends(get_engine),
):
    """Create a draft event; business rules are enforced here."""
    try:
        return await engine.create_event(**request.model_dump())
    except EventFlowError as e:
        raise _http_error(e)


@router.get("/events/{event_id}", response_model=Event)
async def get_event(event_id: UUID, engine: PlanningEngine = Depends(get_engine)):
    """Get an event by ID."""
    try:
        return await engine.get_event(event_id)
    except EventFlowError as e:
        raise _http_error(e)


@router.post("/events/{event_id}/transitions", response_model=Event)
async def transition_event(
    event_id: UUID,
    request: TransitionRequest,
    engine: PlanningEngine = Depends(get_engine),
):
    """Move an event to another lifecycle state."""
    try:
        return await engine.transition(event_id, request.status, request.reason)
    except EventFlowError as e:
        raise _http_error(e)


@router.get("/events/{event_id}/transitions/{status}", response_model=TransitionCheckResponse)
async def check_transition(
    event_id: UUID,
    status: str,
    engine: PlanningEngine = Depends(get_engine),
):
    """Dry-run a transition without changing anything."""
    try:
        event, condition = await engine.check_transition(event_id, status)
    except EventFlowError as e:
        raise _http_error(e)

    return TransitionCheckResponse(
        allowed=condition is None,
        current_status=event.status.value,
        requested_status=status,
        unmet_condition=condition,
    )


@router.get("/events/{event_id}/audit", response_model=list[AuditLogResponse])
async def list_audit_log(event_id: UUID, engine: PlanningEngine = Depends(get_engine)):
    """An event's transition history."""
    try:
        entries = await engine.list_audit_log(event_id)
    except EventFlowError as e:
        raise _http_error(e)
    return [AuditLogResponse(**entry.model_dump()) for entry in entries]


# ============================================================================
# Preferences & recommendations
# ============================================================================


@router.get("/events/{event_id}/preferences", response_model=AggregatedPreferences)
async def get_aggregated_preferences(
    event_id: UUID,
    engine: PlanningEngine = Depends(get_engine),
):
    """Consensus preferences of the accepted participants."""
    try:
        return await engine.aggregate_preferences(event_id)
    except EventFlowError as e:
        raise _http_error(e)


@router.get("/events/{event_id}/recommendations", response_model=list[RecommendationResponse])
async def list_recommendations(event_id: UUID, engine: PlanningEngine = Depends(get_engine)):
    """Stored recommendations, best first."""
    try:
        options = await engine.list_recommendations(event_id)
    except EventFlowError as e:
        raise _http_error(e)
    return [RecommendationResponse.from_option(o) for o in options]


@router.post("/events/{event_id}/recommendations", response_model=list[RecommendationResponse])
async def generate_recommendations(
    event_id: UUID,
    request: GenerateRecommendationsRequest | None = None,
    engine: PlanningEngine = Depends(get_engine),
):
    """Generate recommendations without touching the lifecycle."""
    try:
        options = await engine.generate_recommendations(event_id, _to_point(request))
    except EventFlowError as e:
        raise _http_error(e)
    return [RecommendationResponse.from_option(o) for o in options]


@router.post("/events/{event_id}/generate-recommendations", response_model=WorkflowResponse)
async def run_recommendation_workflow(
    event_id: UUID,
    request: GenerateRecommendationsRequest | None = None,
    engine: PlanningEngine = Depends(get_engine),
):
    """Gather preferences, recommend venues, and open voting."""
    try:
        result = await engine.run_recommendation_workflow(event_id, _to_point(request))
    except EventFlowError as e:
        raise _http_error(e)

    if result["count"]:
        message = "Recommendations generated successfully"
    else:
        message = "No recommendations were generated. Adjust the search criteria and try again."

    return WorkflowResponse(
        event_id=result["event_id"],
        status=result["status"],
        count=result["count"],
        recommendations=[RecommendationResponse.from_option(o) for o in result["options"]],
        message=message,
    )
