from fastapi import APIRouter, Depends, HTTPException, Query, Response

from slotwise.api.schemas import (
    AlternativeSchema,
    AssignmentSchema,
    AvailabilityRequestSchema,
    AvailabilityResponseSchema,
    BookingRequestSchema,
    BookingResponseSchema,
    BookingSchema,
    ResourceSchema,
    SlotsResponseSchema,
    TableAssignRequestSchema,
)
from slotwise.application.exceptions import DependencyError, NotFoundError, ValidationError
from slotwise.application.use_cases.assign_table import AssignmentResult, TableAssignmentEngine
from slotwise.application.use_cases.check_availability import AvailabilityResult, CheckAvailabilityUseCase
from slotwise.application.use_cases.create_booking import BookingRequest, CreateBookingUseCase
from slotwise.application.use_cases.find_next_slots import NextSlotFinder
from slotwise.core.config import settings
from slotwise.domain.entities.booking import Booking, BookingStatus
from slotwise.domain.entities.resource import Resource
from slotwise.wiring.dependencies import (
    get_availability_use_case,
    get_create_booking_use_case,
    get_next_slot_finder,
    get_table_engine,
)

router = APIRouter(prefix="/businesses/{business_id}")


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DependencyError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _resource_schema(resource: Resource) -> ResourceSchema:
    return ResourceSchema(id=resource.id, label=resource.label, capacity=resource.capacity, zone=resource.zone)


def _assignment_schema(result: AssignmentResult | None) -> AssignmentSchema | None:
    if result is None:
        return None
    return AssignmentSchema(
        success=result.success,
        message=result.message,
        assignment_type=result.assignment_type,
        resources=[_resource_schema(r) for r in result.resources],
        combination_id=result.combination.id if result.combination else None,
        score=result.score,
        reason=result.reason,
        alternatives=[
            AlternativeSchema(resource=_resource_schema(a.resource), score=a.score, reason=a.reason)
            for a in result.alternatives
        ],
        suggested_times=list(result.suggested_times),
    )


def _availability_schema(result: AvailabilityResult) -> AvailabilityResponseSchema:
    return AvailabilityResponseSchema(
        available=result.available,
        has_conflict=result.has_conflict,
        is_within_business_hours=result.is_within_business_hours,
        message=result.message,
        duration_minutes=result.duration_minutes,
        conflicting_booking_id=result.conflicting_booking.id if result.conflicting_booking else None,
        suggested_times=list(result.suggested_times),
        assignment=_assignment_schema(result.assignment),
    )


def _booking_schema(booking: Booking) -> BookingSchema:
    return BookingSchema(
        id=booking.id,
        business_id=booking.business_id,
        start=booking.start.isoformat(),
        duration_minutes=booking.duration_minutes,
        status=BookingStatus(booking.status).value,
        resource_ids=list(booking.resource_ids),
        party_size=booking.party_size,
        client_name=booking.client_name,
        service_name=booking.service_name,
    )


@router.post("/availability", response_model=AvailabilityResponseSchema)
async def check_availability(
    business_id: str,
    req: AvailabilityRequestSchema,
    uc: CheckAvailabilityUseCase = Depends(get_availability_use_case),
):
    try:
        result = await uc.execute(
            business_id,
            req.date,
            req.time,
            duration_minutes=req.duration_minutes,
            services=[s.model_dump() for s in req.services] or None,
            party_size=req.party_size,
            preference=req.preference,
        )
    except (ValidationError, NotFoundError, DependencyError) as e:
        raise _to_http_error(e)
    return _availability_schema(result)


@router.post("/tables/assign", response_model=AssignmentSchema)
async def assign_table(
    business_id: str,
    req: TableAssignRequestSchema,
    engine: TableAssignmentEngine = Depends(get_table_engine),
):
    try:
        result = await engine.find_best_table(
            business_id,
            req.date,
            req.time,
            req.party_size,
            req.duration_minutes,
            req.preference,
        )
    except (ValidationError, NotFoundError) as e:
        raise _to_http_error(e)
    return _assignment_schema(result)


@router.get("/slots", response_model=SlotsResponseSchema)
async def list_slots(
    business_id: str,
    date: str = Query(...),
    duration_minutes: int = Query(default=settings.DEFAULT_DURATION_MINUTES, gt=0),
    finder: NextSlotFinder = Depends(get_next_slot_finder),
):
    try:
        slots = await finder.list_day(
            business_id, date, duration_minutes, interval_minutes=settings.PUBLIC_SLOT_INTERVAL_MINUTES
        )
    except (ValidationError, NotFoundError, DependencyError) as e:
        raise _to_http_error(e)
    return SlotsResponseSchema(date=date, slots=slots)


@router.get("/slots/next", response_model=SlotsResponseSchema)
async def next_slots(
    business_id: str,
    date: str = Query(...),
    time: str = Query(...),
    duration_minutes: int = Query(default=settings.DEFAULT_DURATION_MINUTES, gt=0),
    finder: NextSlotFinder = Depends(get_next_slot_finder),
):
    try:
        slots = await finder.find_from_local(
            business_id,
            date,
            time,
            duration_minutes,
            max_suggestions=settings.MAX_SUGGESTIONS,
            increment_minutes=settings.SLOT_INCREMENT_MINUTES,
        )
    except (ValidationError, NotFoundError, DependencyError) as e:
        raise _to_http_error(e)
    return SlotsResponseSchema(date=date, slots=slots)


@router.post("/bookings", response_model=BookingResponseSchema, status_code=201)
async def create_booking(
    business_id: str,
    req: BookingRequestSchema,
    response: Response,
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    try:
        outcome = await uc.execute(
            BookingRequest(
                business_id=business_id,
                date=req.date,
                time=req.time,
                client_name=req.client_name,
                client_phone=req.client_phone,
                client_email=req.client_email,
                duration_minutes=req.duration_minutes,
                services=tuple(s.model_dump() for s in req.services),
                party_size=req.party_size,
                preference=req.preference,
                service_name=req.service_name,
            )
        )
    except (ValidationError, NotFoundError, DependencyError) as e:
        raise _to_http_error(e)

    if not outcome.created:
        response.status_code = 409
    return BookingResponseSchema(
        created=outcome.created,
        message=outcome.message,
        booking=_booking_schema(outcome.booking) if outcome.booking else None,
        assignment=_assignment_schema(outcome.assignment),
        suggested_times=list(outcome.availability.suggested_times) if outcome.availability else [],
        notified=outcome.notified,
    )
