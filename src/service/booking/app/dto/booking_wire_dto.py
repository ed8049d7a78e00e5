"""
Booking wire models

The one place external booking payloads are normalized. Keys arrive as
snake_case or camelCase (older records use flat ``parent_first_name`` style
guardian fields and newline-separated itinerary text); everything past this
module sees the canonical shape. Output is camelCase JSON.
"""

from datetime import date, datetime, time
from typing import Annotated, Any, List, Optional

from pydantic import (
    AfterValidator,
    AliasChoices,
    AliasGenerator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


def _either_case(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_camel(field_name))


def _split_notes(value: Any) -> Any:
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return value


def _legacy_booking_status(value: Any) -> Any:
    # 'completed' predates the current status set
    return 'confirmed' if value == 'completed' else value


def _legacy_payment_status(value: Any) -> Any:
    return 'pending' if value == 'failed' else value


WireAmount = Annotated[float, AfterValidator(lambda v: round(v, 2))]
WireTime = Annotated[time, PlainSerializer(lambda t: t.strftime('%H:%M'), return_type=str)]
ItineraryNotes = Annotated[List[str], BeforeValidator(_split_notes)]


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_either_case,
            serialization_alias=to_camel,
        ),
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra='ignore',
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


class ParentGuardianRecord(WireModel):
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    phone: Optional[str] = None
    address: Optional[str] = None
    postcode: Optional[str] = None
    county: Optional[str] = None
    emergency_contact: Optional[str] = None


class ParticipantRecord(WireModel):
    first_name: str
    last_name: str = ''
    date_of_birth: Optional[date] = None
    child_id: Optional[str] = None
    medical_info: Optional[str] = None
    special_needs: Optional[str] = None


class ScheduleActivityRecord(WireModel):
    name: str
    activity_id: Optional[str] = None
    duration_hours: Optional[WireAmount] = Field(default=None, ge=0)


class ScheduleRecord(WireModel):
    id: Optional[str] = None
    date: date
    start_time: WireTime
    end_time: WireTime
    status: str = 'scheduled'
    trainer_id: Optional[str] = None
    activities: List[ScheduleActivityRecord] = Field(default_factory=list)
    itinerary_notes: ItineraryNotes = Field(default_factory=list)
    location: Optional[str] = None
    mode_key: Optional[str] = None
    original_date: Optional[date] = None
    original_start_time: Optional[WireTime] = None
    rescheduled_at: Optional[datetime] = None
    reschedule_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


_FLAT_GUARDIAN_FIELDS = {
    'first_name': ('parent_first_name', 'parentFirstName'),
    'last_name': ('parent_last_name', 'parentLastName'),
    'email': ('parent_email', 'parentEmail'),
    'phone': ('parent_phone', 'parentPhone'),
    'address': ('parent_address', 'parentAddress'),
    'postcode': ('parent_postcode', 'parentPostcode'),
    'county': ('parent_county', 'parentCounty'),
    'emergency_contact': ('emergency_contact', 'emergencyContact'),
}


def _fold_flat_guardian(data: Any) -> Any:
    if not isinstance(data, dict) or 'parent_guardian' in data or 'parentGuardian' in data:
        return data
    guardian = {
        field: next((data[key] for key in keys if data.get(key) is not None), None)
        for field, keys in _FLAT_GUARDIAN_FIELDS.items()
    }
    if not any(guardian.values()):
        return data
    return {**data, 'parent_guardian': {k: v for k, v in guardian.items() if v is not None}}


class BookingRecord(WireModel):
    """A booking as stored and exchanged with persistence"""

    id: str
    reference: str
    status: Annotated[str, BeforeValidator(_legacy_booking_status)] = 'draft'
    payment_status: Annotated[str, BeforeValidator(_legacy_payment_status)] = 'pending'
    parent_guardian: ParentGuardianRecord = Field(default_factory=ParentGuardianRecord)
    participants: List[ParticipantRecord] = Field(default_factory=list)
    schedules: List[ScheduleRecord] = Field(default_factory=list)
    total_hours: WireAmount = 0
    booked_hours: WireAmount = 0
    used_hours: WireAmount = 0
    remaining_hours: WireAmount = 0
    total_price: WireAmount = 0
    paid_amount: WireAmount = 0
    outstanding_amount: WireAmount = 0
    discount_amount: WireAmount = 0
    discount_reason: Optional[str] = None
    applied_top_up_payment_ids: List[str] = Field(default_factory=list)
    package_id: Optional[str] = None
    package_slug: Optional[str] = None
    package_name: Optional[str] = None
    mode_key: Optional[str] = None
    start_date: Optional[date] = None
    package_expires_at: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    deleted_at: Optional[datetime] = None

    @model_validator(mode='before')
    @classmethod
    def normalize_guardian(cls, data: Any) -> Any:
        return _fold_flat_guardian(data)


class SessionRequest(WireModel):
    date: date
    start_time: WireTime
    end_time: WireTime
    trainer_id: Optional[str] = None
    activities: List[ScheduleActivityRecord] = Field(default_factory=list)
    itinerary_notes: ItineraryNotes = Field(default_factory=list)
    location: Optional[str] = None
    mode_key: Optional[str] = None


class CreateBookingRequest(WireModel):
    parent_guardian: ParentGuardianRecord
    participants: List[ParticipantRecord]
    schedules: List[SessionRequest] = Field(default_factory=list)
    total_hours: WireAmount = Field(default=0, ge=0)
    package_base_price: Optional[WireAmount] = Field(default=None, ge=0)
    package_id: Optional[str] = None
    package_slug: Optional[str] = None
    package_name: Optional[str] = None
    package_modes: Optional[List[str]] = None
    mode_key: Optional[str] = None
    start_date: Optional[date] = None
    package_expires_at: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def normalize_guardian(cls, data: Any) -> Any:
        return _fold_flat_guardian(data)


class UpdateBookingRequest(WireModel):
    participants: Optional[List[ParticipantRecord]] = None
    schedules: Optional[List[SessionRequest]] = None
    package_base_price: Optional[WireAmount] = Field(default=None, ge=0)
    notes: Optional[str] = None
