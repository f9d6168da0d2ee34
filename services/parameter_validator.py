# ============================================================================
# PARAMETER VALIDATOR
# ============================================================================
# STATUS: Core - Per-parameter value rules
# PURPOSE: Check one value against one WorkflowParameter's validation rule
# CREATED: 18 OCT 2026
# ============================================================================
"""
Parameter Validator

``validate(slot, value)`` returns None when the value is acceptable,
otherwise a human readable reason. It never raises, including for a
malformed regex or an unknown validation type stored on the slot.

Rules, in order:
1. No validation type (or "none")        -> valid
2. Required and value is None            -> "Required Parameter cannot be null"
3. Optional and value is None            -> valid
4. string: max_length, then full-match of validation_regex
   digits: only 0-9, then integer range check
   number: float parse (finite), then inclusive range check
5. Anything else                         -> "Unknown type of validation"
"""

import math
import re
from typing import Optional, Union

from core.contracts import ValidationType
from core.models import WorkflowParameter

REQUIRED_NULL = "Required Parameter cannot be null"
UNKNOWN_TYPE = "Unknown type of validation"

_DIGITS = re.compile(r"[0-9]+")


def _fmt(number: Union[int, float]) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


class ParameterValidator:
    """Stateless; one instance can be shared."""

    def validate(self, slot: WorkflowParameter, value: Optional[str]) -> Optional[str]:
        if not slot.validation_type or not slot.validation_type.strip():
            return None

        try:
            validation_type = slot.parsed_validation_type()
        except ValueError:
            validation_type = None
        else:
            if validation_type is ValidationType.NONE:
                return None

        if slot.is_required and value is None:
            return REQUIRED_NULL

        if validation_type is None:
            return UNKNOWN_TYPE

        if value is None:
            return None

        if validation_type is ValidationType.STRING:
            return self._validate_string(slot, value)
        if validation_type is ValidationType.DIGITS:
            return self._validate_digits(slot, value)
        if validation_type is ValidationType.NUMBER:
            return self._validate_number(slot, value)
        return UNKNOWN_TYPE

    def _validate_string(self, slot: WorkflowParameter, value: str) -> Optional[str]:
        if slot.max_length is not None and len(value) > slot.max_length:
            return f"Value exceeds maximum length of {slot.max_length} characters"

        if slot.validation_regex:
            try:
                matched = re.fullmatch(slot.validation_regex, value)
            except re.error as e:
                return f"Invalid validation regex '{slot.validation_regex}': {e}"
            if matched is None:
                if slot.validation_help:
                    return f"Value does not match pattern: {slot.validation_help}"
                return f"Value does not match pattern {slot.validation_regex}"
        return None

    def _validate_digits(self, slot: WorkflowParameter, value: str) -> Optional[str]:
        if not _DIGITS.fullmatch(value):
            return f"Value '{value}' must contain only digits"
        return self._check_range(slot, int(value))

    def _validate_number(self, slot: WorkflowParameter, value: str) -> Optional[str]:
        # float() accepts digit grouping such as "1_000"
        if "_" in value:
            return f"Value '{value}' is not a number"
        try:
            number = float(value.strip())
        except ValueError:
            return f"Value '{value}' is not a number"
        if not math.isfinite(number):
            return f"Value '{value}' is not a finite number"
        return self._check_range(slot, number)

    @staticmethod
    def _check_range(slot: WorkflowParameter, number: Union[int, float]) -> Optional[str]:
        low, high = slot.min_value, slot.max_value
        below = low is not None and number < low
        above = high is not None and number > high
        if not (below or above):
            return None
        if low is not None and high is not None:
            return f"Value {_fmt(number)} is outside range [{_fmt(low)}, {_fmt(high)}]"
        if below:
            return f"Value {_fmt(number)} is below minimum {_fmt(low)}"
        return f"Value {_fmt(number)} is above maximum {_fmt(high)}"


__all__ = ["ParameterValidator", "REQUIRED_NULL", "UNKNOWN_TYPE"]
