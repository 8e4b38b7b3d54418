from pydantic import BaseModel, Field


class ServiceSchema(BaseModel):
    service_name: str | None = None
    duration_minutes: int | None = None


class AvailabilityRequestSchema(BaseModel):
    date: str
    time: str
    duration_minutes: int | None = None
    services: list[ServiceSchema] = Field(default_factory=list)
    party_size: int | None = None
    preference: str | None = None


class TableAssignRequestSchema(BaseModel):
    date: str
    time: str
    party_size: int = Field(gt=0)
    duration_minutes: int = Field(default=90, gt=0)
    preference: str | None = None


class BookingRequestSchema(BaseModel):
    date: str
    time: str
    client_name: str = Field(min_length=1)
    client_phone: str = Field(min_length=1)
    client_email: str | None = None
    duration_minutes: int | None = None
    services: list[ServiceSchema] = Field(default_factory=list)
    party_size: int | None = None
    preference: str | None = None
    service_name: str | None = None


class ResourceSchema(BaseModel):
    id: str
    label: str
    capacity: int
    zone: str | None = None


class AlternativeSchema(BaseModel):
    resource: ResourceSchema
    score: int
    reason: str


class AssignmentSchema(BaseModel):
    success: bool
    message: str | None = None
    assignment_type: str | None = None
    resources: list[ResourceSchema] = Field(default_factory=list)
    combination_id: str | None = None
    score: int | None = None
    reason: str | None = None
    alternatives: list[AlternativeSchema] = Field(default_factory=list)
    suggested_times: list[str] = Field(default_factory=list)


class BookingSchema(BaseModel):
    id: str
    business_id: str
    start: str  # ISO-8601 UTC instant
    duration_minutes: int
    status: str
    resource_ids: list[str] = Field(default_factory=list)
    party_size: int | None = None
    client_name: str | None = None
    service_name: str | None = None


class AvailabilityResponseSchema(BaseModel):
    available: bool
    has_conflict: bool
    is_within_business_hours: bool
    message: str | None = None
    duration_minutes: int | None = None
    conflicting_booking_id: str | None = None
    suggested_times: list[str] = Field(default_factory=list)
    assignment: AssignmentSchema | None = None


class SlotsResponseSchema(BaseModel):
    date: str
    slots: list[str]


class BookingResponseSchema(BaseModel):
    created: bool
    message: str
    booking: BookingSchema | None = None
    assignment: AssignmentSchema | None = None
    suggested_times: list[str] = Field(default_factory=list)
    notified: bool = False
