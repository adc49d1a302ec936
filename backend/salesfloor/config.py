# backend/salesfloor/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from .models.inventory import ProductCategory
from .validation import StoreError, NegativePercentageError, ValidationError, to_decimal, to_int


TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return _as_bool(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Receipt files land in <cwd>/output/receipts unless overridden
    RECEIPT_OUTPUT_DIR = os.environ.get("RECEIPT_OUTPUT_DIR", "output/receipts")
    RECEIPT_MAX_RETRY_ATTEMPTS = int(os.environ.get("RECEIPT_MAX_RETRY_ATTEMPTS", "3"))
    RECEIPT_RETRY_DELAY = float(os.environ.get("RECEIPT_RETRY_DELAY", "1.0"))  # seconds
    RECEIPT_FAIL_ON_DIRECTORY_ERROR = _env_bool("RECEIPT_FAIL_ON_DIRECTORY_ERROR", True)
    RECEIPT_CREATE_MISSING_DIRECTORIES = _env_bool("RECEIPT_CREATE_MISSING_DIRECTORIES", True)
    CURRENCY = os.environ.get("CURRENCY", "BGN")

    # Pricing: markups and discount are fractions (0.20 == 20%)
    STORE_NAME = os.environ.get("STORE_NAME", "Main Store")
    FOOD_MARKUP = os.environ.get("FOOD_MARKUP", "0.20")
    NON_FOOD_MARKUP = os.environ.get("NON_FOOD_MARKUP", "0.30")
    EXPIRATION_THRESHOLD_DAYS = int(os.environ.get("EXPIRATION_THRESHOLD_DAYS", "7"))
    EXPIRATION_DISCOUNT = os.environ.get("EXPIRATION_DISCOUNT", "0.15")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class ConfigurationError(StoreError):
    """Raised when store configuration is invalid; fails before any sale runs."""


@dataclass(frozen=True)
class StoreConfig:
    """
    File-operation and error-handling settings for receipt storage.

    Constructed once at startup and read-only afterwards.
    """
    receipt_output_dir: str = "output/receipts"
    max_retry_attempts: int = 3
    retry_delay: float = 1.0
    fail_on_directory_error: bool = True
    create_missing_directories: bool = True
    currency: str = "BGN"

    def __post_init__(self):
        if not self.receipt_output_dir:
            raise ConfigurationError("receipt_output_dir is required")
        if isinstance(self.max_retry_attempts, bool) or not isinstance(self.max_retry_attempts, int):
            raise ConfigurationError("max_retry_attempts must be an integer")
        if self.max_retry_attempts < 1:
            raise ConfigurationError(
                "max_retry_attempts must be positive",
                details={"max_retry_attempts": self.max_retry_attempts},
            )
        if self.retry_delay < 0:
            raise ConfigurationError(
                "retry_delay cannot be negative",
                details={"retry_delay": self.retry_delay},
            )

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "StoreConfig":
        """Build from a Flask-style config mapping (see :class:`Config`)."""
        defaults = cls()
        try:
            return cls(
                receipt_output_dir=str(cfg.get("RECEIPT_OUTPUT_DIR", defaults.receipt_output_dir)),
                max_retry_attempts=to_int(
                    cfg.get("RECEIPT_MAX_RETRY_ATTEMPTS", defaults.max_retry_attempts),
                    "RECEIPT_MAX_RETRY_ATTEMPTS",
                ),
                retry_delay=float(cfg.get("RECEIPT_RETRY_DELAY", defaults.retry_delay)),
                fail_on_directory_error=_as_bool(
                    cfg.get("RECEIPT_FAIL_ON_DIRECTORY_ERROR", defaults.fail_on_directory_error)
                ),
                create_missing_directories=_as_bool(
                    cfg.get("RECEIPT_CREATE_MISSING_DIRECTORIES", defaults.create_missing_directories)
                ),
                currency=str(cfg.get("CURRENCY", defaults.currency)),
            )
        except (ValidationError, ValueError, TypeError) as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid receipt storage configuration: {exc}") from exc


@dataclass(frozen=True)
class PricingPolicy:
    """
    Store-wide pricing parameters.

    Markups and the discount are fractional rates; the threshold is the
    number of days before expiration at which the discount starts.
    """
    food_markup: Decimal
    non_food_markup: Decimal
    expiration_threshold_days: int
    expiration_discount: Decimal
    store_name: str = "Main Store"

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        for field in ("food_markup", "non_food_markup", "expiration_discount"):
            value = to_decimal(getattr(self, field), field)
            if value < 0:
                raise NegativePercentageError(value, field=field)
            object.__setattr__(self, field, value)
        if self.expiration_discount > 1:
            raise ConfigurationError(
                "expiration_discount cannot exceed 1",
                details={"expiration_discount": str(self.expiration_discount)},
            )
        threshold = to_int(self.expiration_threshold_days, "expiration_threshold_days")
        if threshold < 0:
            raise ConfigurationError(
                "expiration_threshold_days cannot be negative",
                details={"expiration_threshold_days": threshold},
            )
        object.__setattr__(self, "expiration_threshold_days", threshold)

    def markup_for(self, category: ProductCategory) -> Decimal:
        if category == ProductCategory.FOOD:
            return self.food_markup
        return self.non_food_markup

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "PricingPolicy":
        return cls(
            food_markup=cfg.get("FOOD_MARKUP", "0.20"),
            non_food_markup=cfg.get("NON_FOOD_MARKUP", "0.30"),
            expiration_threshold_days=cfg.get("EXPIRATION_THRESHOLD_DAYS", 7),
            expiration_discount=cfg.get("EXPIRATION_DISCOUNT", "0.15"),
            store_name=str(cfg.get("STORE_NAME", "Main Store")),
        )
