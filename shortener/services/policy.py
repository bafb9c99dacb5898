"""
Alias Policy

The rules every allocation, resolution and listing is evaluated against,
gathered in one immutable object. Built from settings in production;
tests construct their own.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from shortener.core.setting import ExpirationStrategy, Settings


@dataclass(frozen=True)
class AliasPolicy:
    """
    Allocation, quota and expiration rules.

    Attributes:
        min_code_length: Shortest generated code
        max_code_length: Longest generated code
        generation_attempts: Inserts tried for generated codes before CodeTaken
        custom_min_length: Shortest accepted custom code
        custom_max_length: Longest accepted custom code
        allow_separators: Accept '-' and '_' in custom codes
        max_links_per_owner: Live aliases an owner may hold
        retention: Lifetime of an alias, None for no expiry
        expiration_strategy: lazy or eager reconciliation
    """
    min_code_length: int = 6
    max_code_length: int = 6
    generation_attempts: int = 3
    custom_min_length: int = 2
    custom_max_length: int = 20
    allow_separators: bool = False
    max_links_per_owner: int = 11
    retention: Optional[timedelta] = timedelta(days=30)
    expiration_strategy: ExpirationStrategy = ExpirationStrategy.lazy

    @property
    def eager_expiration(self) -> bool:
        return self.expiration_strategy == ExpirationStrategy.eager

    @classmethod
    def from_settings(cls, settings: Settings) -> "AliasPolicy":
        retention = None
        if settings.RETENTION_DAYS:
            retention = timedelta(days=settings.RETENTION_DAYS)

        return cls(
            min_code_length=settings.SHORT_CODE_MIN_LENGTH,
            max_code_length=settings.SHORT_CODE_MAX_LENGTH,
            generation_attempts=settings.SHORT_CODE_GENERATION_ATTEMPTS,
            custom_min_length=settings.CUSTOM_CODE_MIN_LENGTH,
            custom_max_length=settings.CUSTOM_CODE_MAX_LENGTH,
            allow_separators=settings.CUSTOM_CODE_ALLOW_SEPARATORS,
            max_links_per_owner=settings.MAX_LINKS_PER_OWNER,
            retention=retention,
            expiration_strategy=settings.EXPIRATION_STRATEGY,
        )
