from datetime import date, time
from decimal import Decimal

import pytest

from src.platform.exception.exceptions import ValidationError
from src.service.booking.domain.value_object.booking_reference import (
    BookingReference,
    normalize_postcode,
    type_code_for,
)
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money
from src.service.booking.domain.value_object.time_slot import TimeSlot


@pytest.mark.unit
class TestBookingReference:
    def test_generated_reference_has_all_parts(self) -> None:
        reference = BookingReference.generate(
            prefix='cams', postcode='sw1a 1aa', package_slug='ten-hour-package'
        )

        assert reference.prefix == 'CAMS'
        assert reference.postcode == 'SW1A1AA'
        assert reference.type_code == 'THP'
        assert len(reference.sequence) == 6
        assert str(reference).startswith('CAMS-SW1A1AA-THP-')

    def test_parse_normalizes_case_and_whitespace(self) -> None:
        reference = BookingReference.parse('  cams-sw1a1aa-thp-004211 ')

        assert reference.value == 'CAMS-SW1A1AA-THP-004211'

    @pytest.mark.parametrize(
        'raw', ['', 'CAMS-SW1A1AA-THP', 'CAMS-SW1A1AA-THP-12', 'C-SW1A1AA-THP-004211']
    )
    def test_malformed_reference_is_rejected(self, raw: str) -> None:
        with pytest.raises(ValidationError, match='Invalid booking reference'):
            BookingReference.parse(raw)

    def test_missing_postcode_and_slug_fall_back(self) -> None:
        assert normalize_postcode(None) == 'NOPC'
        assert normalize_postcode('N1') == 'NOPC'
        assert type_code_for(None) == 'PKG'
        assert type_code_for('holiday') == 'PKG'
        assert type_code_for('holiday-club') == 'HC'


@pytest.mark.unit
class TestQuantities:
    def test_two_places_half_up(self) -> None:
        assert Money('10.005').amount == Decimal('10.01')
        assert Money(0.1).amount == Decimal('0.10')
        assert Hours('1.234').value == Decimal('1.23')

    def test_negative_values_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match='cannot be negative'):
            Money('-1')
        with pytest.raises(ValidationError, match='cannot be negative'):
            Hours('2') - Hours('3')

    def test_non_numbers_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match='Not a number'):
            Money('ten')
        with pytest.raises(ValidationError, match='Not a finite number'):
            Hours('NaN')

    def test_hours_from_minutes(self) -> None:
        assert Hours.from_minutes(90) == Hours('1.5')
        assert Hours.from_minutes(20) == Hours('0.33')
        assert str(Hours('2.50')) == '2.5h'


@pytest.mark.unit
class TestTimeSlot:
    def test_end_must_follow_start(self) -> None:
        with pytest.raises(ValidationError, match='End time must be after start time'):
            TimeSlot(date=date(2030, 6, 10), start_time=time(12, 0), end_time=time(12, 0))

    def test_duration(self) -> None:
        slot = TimeSlot(date=date(2030, 6, 10), start_time=time(9, 15), end_time=time(11, 45))

        assert slot.duration == Hours('2.5')


@pytest.mark.unit
class TestParticipant:
    def test_child_key_prefers_child_id(self) -> None:
        participant = Participant(first_name='Tom', last_name='Doe', child_id='c-1')

        assert participant.child_key == 'child:c-1'

    def test_child_key_from_name_and_birth_date(self) -> None:
        participant = Participant(
            first_name=' Tom ', last_name='DOE', date_of_birth=date(2020, 4, 2)
        )

        assert participant.child_key == 'name:tom:doe:2020-04-02'

    def test_age_on(self) -> None:
        participant = Participant(first_name='Tom', last_name='Doe', date_of_birth=date(2020, 4, 2))

        assert participant.age_on(date(2030, 4, 1)) == 9
        assert participant.age_on(date(2030, 4, 2)) == 10
