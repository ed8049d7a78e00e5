from datetime import date
from typing import Optional

import attrs

from src.platform.exception.exceptions import ValidationError


@attrs.define(frozen=True)
class Participant:
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    child_id: Optional[str] = None
    medical_info: Optional[str] = None
    special_needs: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()

    @property
    def child_key(self) -> str:
        """Stable identity of the child across bookings"""
        if self.child_id:
            return f'child:{self.child_id}'
        dob = self.date_of_birth.isoformat() if self.date_of_birth else 'unknown'
        return f'name:{self.first_name.strip().lower()}:{self.last_name.strip().lower()}:{dob}'

    def age_on(self, day: date) -> int | None:
        if self.date_of_birth is None:
            return None
        dob = self.date_of_birth
        return day.year - dob.year - ((day.month, day.day) < (dob.month, dob.day))

    def validate(self) -> None:
        if not self.first_name.strip():
            raise ValidationError('Participant first name is required', field='participants')
        if self.date_of_birth and self.date_of_birth > date.today():
            raise ValidationError(
                f'Date of birth for {self.full_name} is in the future', field='participants'
            )
