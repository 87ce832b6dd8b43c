"""Configuration validation utilities."""

import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


# field -> (min, max), both inclusive
GENERATOR_LIMITS = {
    "max_signals": (1, 10),
    "interval_minutes": (1, 60),
    "entry_after_consecutive_count": (1, 10),
}

MAX_WINDOW_SIZE = 20
MIN_HISTORY_DIGITS = 5


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_generator_settings(params: dict[str, Any]) -> list[ValidationError]:
        """
        Validate a (possibly partial) generator settings mapping.

        Only keys present in params are checked. Unknown keys are reported
        so that typos never silently reach the scheduler.
        """
        errors = []

        for key, value in params.items():
            if key not in GENERATOR_LIMITS:
                errors.append(ValidationError(
                    field=key,
                    message="Unknown generator setting",
                    value=value
                ))
                continue

            low, high = GENERATOR_LIMITS[key]
            if not _is_number(value) or math.isnan(value) or value < low or value > high:
                errors.append(ValidationError(
                    field=key,
                    message=f"Must be a number between {low} and {high}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_history_params(params: dict[str, Any]) -> list[ValidationError]:
        """
        Validate history parameters.

        The window never holds more than MAX_WINDOW_SIZE digits and no
        analysis runs on fewer than MIN_HISTORY_DIGITS.
        """
        errors = []

        for key in ("window_size", "analysis_window", "min_digits"):
            if key in params:
                value = params[key]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=key,
                        message="Must be a positive integer",
                        value=value
                    ))

        window = _int_or_none(params.get("window_size"))
        analysis = _int_or_none(params.get("analysis_window"))
        min_digits = _int_or_none(params.get("min_digits"))

        if window is not None and window > MAX_WINDOW_SIZE:
            errors.append(ValidationError(
                field="window_size",
                message=f"Must not exceed {MAX_WINDOW_SIZE}",
                value=window
            ))

        if min_digits is not None and 0 < min_digits < MIN_HISTORY_DIGITS:
            errors.append(ValidationError(
                field="min_digits",
                message=f"Must be at least {MIN_HISTORY_DIGITS}",
                value=min_digits
            ))

        if window is not None and analysis is not None and analysis > window:
            errors.append(ValidationError(
                field="analysis_window",
                message="Must not exceed window_size",
                value=analysis
            ))

        if window is not None and min_digits is not None and min_digits > window:
            errors.append(ValidationError(
                field="min_digits",
                message="Must not exceed window_size",
                value=min_digits
            ))

        return errors

    @staticmethod
    def validate_email_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate e-mail parameters."""
        errors = []

        if "smtp_port" in params:
            value = params["smtp_port"]
            if not isinstance(value, int) or isinstance(value, bool) or not 0 < value < 65536:
                errors.append(ValidationError(
                    field="smtp_port",
                    message="Must be a valid TCP port",
                    value=value
                ))

        if "recipients" in params:
            value = params["recipients"]
            if not isinstance(value, (list, tuple)) or not all(isinstance(r, str) for r in value):
                errors.append(ValidationError(
                    field="recipients",
                    message="Must be a list of e-mail addresses",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "generator" in config:
            errors.extend(ConfigValidator.validate_generator_settings(config["generator"]))

        if "history" in config:
            errors.extend(ConfigValidator.validate_history_params(config["history"]))

        if "email" in config:
            errors.extend(ConfigValidator.validate_email_params(config["email"]))

        return errors
