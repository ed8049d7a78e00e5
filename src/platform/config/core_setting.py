from decimal import Decimal
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Child Care Booking Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = False  # Enables IO logging and the file sink
    SERVICE_NAME: str = 'booking-service'

    # Money
    DEFAULT_CURRENCY: str = 'GBP'
    HOURLY_RATE: Decimal = Decimal('30.00')  # Used when a package is not pre-priced

    # Discount policy (percentages)
    VOLUME_DISCOUNT_TIERS: dict[int, Decimal] = {20: Decimal('5'), 40: Decimal('10')}
    EARLY_BOOKING_DAYS: int = 14
    EARLY_BOOKING_DISCOUNT_PERCENT: Decimal = Decimal('5')
    MULTI_CHILD_DISCOUNT_PERCENT: Decimal = Decimal('10')
    MAX_DISCOUNT_PERCENT: Decimal = Decimal('30')

    # Booking reference: CAMS-<POSTCODE>-<TYPE>-<SEQ>
    BOOKING_REFERENCE_PREFIX: str = 'CAMS'
    REFERENCE_MAX_ATTEMPTS: int = 10

    # Hours ledger
    PAY_FIRST_PLACEHOLDER_HOURS: Decimal = Decimal('0.01')
    TOP_UP_MAX_HOURS: Decimal = Decimal('100')

    # Scheduling policy
    SAME_DAY_BOOKING_ALLOWED: bool = False
    NEXT_DAY_CUTOFF_HOUR: int = 18
    MIN_ADVANCE_HOURS: int = 24

    # Checkout
    CHECKOUT_BASE_URL: str = 'https://checkout.example.com/pay'

    @field_validator('BOOKING_REFERENCE_PREFIX', mode='before')
    @classmethod
    def normalize_reference_prefix(cls, v: str) -> str:
        prefix = str(v).strip().upper()
        if not prefix.isalpha():
            raise ValueError('BOOKING_REFERENCE_PREFIX must contain letters only')
        return prefix

    @field_validator('NEXT_DAY_CUTOFF_HOUR')
    @classmethod
    def check_cutoff_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError('NEXT_DAY_CUTOFF_HOUR must be between 0 and 23')
        return v


settings = Settings()
