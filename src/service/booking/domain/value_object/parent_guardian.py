import re
from typing import Optional

import attrs

from src.platform.exception.exceptions import ValidationError


_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@attrs.define(frozen=True)
class ParentGuardian:
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    postcode: Optional[str] = None
    county: Optional[str] = None
    emergency_contact: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()

    def validate(self) -> None:
        if not self.full_name:
            raise ValidationError('Parent/guardian name is required', field='parent_guardian')
        if not self.email:
            raise ValidationError('Parent/guardian email is required', field='email')
        if not _EMAIL_PATTERN.match(self.email):
            raise ValidationError(f'Invalid email address: {self.email}', field='email')
