"""
API Visibility Core: Input Validators.

Eager validation helpers for masks and configuration sections. The rule
engine itself never validates at construction; these are for callers that
want misconfiguration reported at startup (the CLI ``--check`` flag, the
configuration loader).
"""
from typing import Any, Dict, Iterable, List

from apivisibility.core.constants import ConfigKey, ErrorCode


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_mask(mask: Any) -> bool:
    """Validate a single ``Group[.Operation]`` mask.

    Compiles both halves so an invalid pattern is reported here instead of
    on the first visibility decision that needs it.

    Args:
        mask: Mask string

    Returns:
        True if valid

    Raises:
        ValidationError: If mask is not a non-empty string or cannot compile
    """
    # Imported here to keep core free of a module-level dependency on rules
    from apivisibility.rules.patterns import InvalidPatternError, compile_mask

    if not isinstance(mask, str):
        raise ValidationError(f"Mask must be a string, got {type(mask).__name__}")

    if not mask.strip():
        raise ValidationError("Mask cannot be empty")

    try:
        compile_mask(mask)
    except InvalidPatternError as e:
        raise ValidationError(f"Invalid mask '{mask}': {e}")

    return True


def validate_mask_list(masks: Any, field_name: str = "masks") -> bool:
    """Validate a list of masks.

    Args:
        masks: Sequence of mask strings (None is accepted as empty)
        field_name: Name used in error messages

    Returns:
        True if valid

    Raises:
        ValidationError: If any entry is invalid
    """
    if masks is None:
        return True

    if isinstance(masks, (str, bytes)) or not isinstance(masks, Iterable):
        raise ValidationError(f"{field_name} must be a list of masks")

    for i, mask in enumerate(masks):
        try:
            validate_mask(mask)
        except ValidationError as e:
            raise ValidationError(f"Invalid entry in {field_name} at index {i}: {e}")

    return True


def validate_visibility_config(section: Dict[str, Any]) -> bool:
    """Validate an ``ApiConfiguration`` section.

    Args:
        section: Mapping with ``VisibleItems`` / ``HiddenItems`` keys

    Returns:
        True if valid

    Raises:
        ValidationError: If the section is malformed
    """
    if not isinstance(section, dict):
        raise ValidationError(f"{ConfigKey.SECTION} must be a dictionary")

    validate_mask_list(
        _first_present(section, ConfigKey.VISIBLE_ITEMS, ConfigKey.VISIBLE_ITEMS_ALIAS),
        ConfigKey.VISIBLE_ITEMS,
    )
    validate_mask_list(
        _first_present(section, ConfigKey.HIDDEN_ITEMS, ConfigKey.HIDDEN_ITEMS_ALIAS),
        ConfigKey.HIDDEN_ITEMS,
    )

    return True


def _first_present(section: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in section:
            return section[key]
    return None


def normalize_mask_list(value: Any) -> List[str]:
    """Coerce a configured mask value to a list of strings.

    A single string becomes a one-element list, None becomes empty.

    Raises:
        ValidationError: If value is neither a string nor a list of strings
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"Expected list of masks, got {type(value).__name__}")

    result = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"Mask must be a string, got {type(item).__name__}")
        result.append(item)
    return result
