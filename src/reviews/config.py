"""Service policy for the Reviews domain.

Persistence settings live in ``domain.toml``; the knobs below steer how the
review service behaves and are read from ``REVIEWS_*`` environment variables.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReviewSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REVIEWS_", case_sensitive=False)

    # Status given to a newly submitted review: "Visible" counts toward the
    # product rating immediately, "Pending" waits for an admin.
    DEFAULT_STATUS: str = "Visible"

    # Reject reviews that have no delivered order on record
    REQUIRE_VERIFIED_PURCHASE: bool = False

    # Attempts for a unit of work that loses an optimistic-concurrency race
    MAX_TRANSACTION_ATTEMPTS: int = 3

    # Seconds before the first retry; doubles on each further attempt
    RETRY_BASE_DELAY: float = 0.05

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    @field_validator("DEFAULT_STATUS")
    @classmethod
    def status_must_be_known(cls, value: str) -> str:
        if value not in ("Pending", "Visible"):
            raise ValueError("DEFAULT_STATUS must be 'Pending' or 'Visible'")
        return value

    @field_validator("MAX_TRANSACTION_ATTEMPTS")
    @classmethod
    def at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("MAX_TRANSACTION_ATTEMPTS must be at least 1")
        return value

    @field_validator("RETRY_BASE_DELAY")
    @classmethod
    def delay_not_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("RETRY_BASE_DELAY cannot be negative")
        return value


@lru_cache
def get_settings() -> ReviewSettings:
    """Return the process-wide settings instance."""
    return ReviewSettings()
