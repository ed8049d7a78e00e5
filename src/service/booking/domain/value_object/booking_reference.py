"""
Booking reference, e.g. ``CAMS-SW1A1AA-THP-004211``

<PREFIX>-<POSTCODE 4-10 alnum>-<TYPE 2-5 letters>-<SEQ 4-6 digits>
"""

import re
import secrets

import attrs

from src.platform.exception.exceptions import ValidationError


_REFERENCE_PATTERN = re.compile(r'^([A-Z]{2,8})-([A-Z0-9]{4,10})-([A-Z]{2,5})-(\d{4,6})$')
NO_POSTCODE = 'NOPC'
DEFAULT_TYPE_CODE = 'PKG'


def normalize_postcode(postcode: str | None) -> str:
    cleaned = re.sub(r'[^A-Z0-9]', '', (postcode or '').upper())
    if len(cleaned) < 4:
        return NO_POSTCODE
    return cleaned[:10]


def type_code_for(package_slug: str | None) -> str:
    """Initials of the package slug words: 'ten-hour-package' -> 'THP'"""
    words = [w for w in re.split(r'[^A-Za-z]+', package_slug or '') if w]
    code = ''.join(w[0] for w in words).upper()[:5]
    return code if len(code) >= 2 else DEFAULT_TYPE_CODE


def _check_format(instance: 'BookingReference', attribute: attrs.Attribute, value: str) -> None:
    if not _REFERENCE_PATTERN.match(value):
        raise ValidationError(f'Invalid booking reference: {value!r}', field='reference')


@attrs.define(frozen=True)
class BookingReference:
    value: str = attrs.field(validator=_check_format)

    @classmethod
    def parse(cls, raw: str) -> 'BookingReference':
        return cls((raw or '').strip().upper())

    @classmethod
    def generate(
        cls, *, prefix: str, postcode: str | None, package_slug: str | None
    ) -> 'BookingReference':
        sequence = f'{secrets.randbelow(1_000_000):06d}'
        return cls(
            f'{prefix.upper()}-{normalize_postcode(postcode)}-{type_code_for(package_slug)}-{sequence}'
        )

    @property
    def _parts(self) -> tuple[str, ...]:
        match = _REFERENCE_PATTERN.match(self.value)
        assert match is not None
        return match.groups()

    @property
    def prefix(self) -> str:
        return self._parts[0]

    @property
    def postcode(self) -> str:
        return self._parts[1]

    @property
    def type_code(self) -> str:
        return self._parts[2]

    @property
    def sequence(self) -> str:
        return self._parts[3]

    def __str__(self) -> str:
        return self.value
