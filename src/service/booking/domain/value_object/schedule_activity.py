from typing import Optional

import attrs

from src.service.booking.domain.value_object.quantity import Hours


@attrs.define(frozen=True)
class ScheduleActivity:
    name: str
    activity_id: Optional[str] = None
    duration_hours: Optional[Hours] = None
