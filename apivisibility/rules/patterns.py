#!/usr/bin/env python3
r"""Mask and wildcard pattern matching for operation names.

This module provides the pure matching helpers behind visibility decisions:
- Wildcard translation (``*`` any sequence, ``?`` one character)
- Case-insensitive full-string matching with compiled pattern caching
- ``Group[.Operation]`` mask splitting
- Group/operation conjunction with group-only fallback

Example:
    >>> match_pattern("GetUser", "Get*")
    True
    >>> match_item("User", "SetUser", "User.Get*")
    False
    >>> match_item("User", None, "User.Get*")
    True
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern, Tuple

from apivisibility.core.constants import (
    MASK_SEPARATOR,
    PATTERN_CACHE_SIZE,
    WILDCARD_ANY,
    WILDCARD_CHARS,
    WILDCARD_ONE,
    ErrorCode,
)


class InvalidPatternError(ValueError):
    """A wildcard pattern could not be compiled into a matcher."""

    def __init__(self, pattern: str, reason: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.pattern = pattern
        self.reason = reason
        self.error_code = error_code
        super().__init__(f"Invalid pattern '{pattern}': {reason}")


@dataclass(frozen=True)
class Mask:
    """A parsed ``Group[.Operation]`` mask."""

    raw: str
    group_pattern: str
    operation_pattern: Optional[str] = None

    @property
    def has_operation(self) -> bool:
        """Return True if the mask carries an operation half."""
        return self.operation_pattern is not None


def has_wildcards(pattern: str) -> bool:
    """Check whether pattern contains ``?`` or ``*``."""
    return any(char in pattern for char in WILDCARD_CHARS)


def translate_wildcard(pattern: str) -> str:
    """Translate a wildcard pattern to a regular expression.

    ``.`` is matched literally, ``*`` becomes ``.*`` and ``?`` becomes ``.``.
    Every other character is passed through to the regex engine, so
    character classes like ``[GS]et*`` keep working and unbalanced
    brackets fail to compile.

    Args:
        pattern: Wildcard pattern

    Returns:
        Regular expression source (unanchored; use ``fullmatch``)
    """
    parts = []
    for char in pattern:
        if char == ".":
            parts.append("[.]")
        elif char == WILDCARD_ANY:
            parts.append(".*")
        elif char == WILDCARD_ONE:
            parts.append(".")
        else:
            parts.append(char)
    return "".join(parts)


@lru_cache(maxsize=PATTERN_CACHE_SIZE)
def compile_pattern(pattern: str) -> Pattern:
    """Compile a wildcard pattern to a case-insensitive regex.

    Results are cached per pattern string; failures are not cached.

    Args:
        pattern: Wildcard pattern

    Returns:
        Compiled regular expression

    Raises:
        InvalidPatternError: If the translated expression does not compile
    """
    try:
        return re.compile(translate_wildcard(pattern), re.IGNORECASE | re.DOTALL)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


@lru_cache(maxsize=PATTERN_CACHE_SIZE)
def compile_literal(pattern: str) -> Pattern:
    """Compile a literal pattern to a case-insensitive regex.

    Every character is escaped, so this never fails.
    """
    return re.compile(re.escape(pattern), re.IGNORECASE | re.DOTALL)


def match_pattern(text: str, pattern: str) -> bool:
    """Match text against a literal or wildcard pattern.

    Literal patterns compare by case-insensitive equality and wildcard
    patterns must match the entire text. Both use the regex engine's
    case folding.

    Args:
        text: Group or operation name
        pattern: Literal or wildcard pattern

    Returns:
        True if text matches

    Raises:
        InvalidPatternError: If a wildcard pattern cannot be compiled
    """
    if not has_wildcards(pattern):
        return compile_literal(pattern).fullmatch(text) is not None

    return compile_pattern(pattern).fullmatch(text) is not None


def split_mask(mask: str) -> Mask:
    """Split a mask at its first ``.``.

    A leading ``.`` does not split: the whole mask is then a group pattern.

    Args:
        mask: Mask string

    Returns:
        Parsed mask
    """
    index = mask.find(MASK_SEPARATOR)
    if index > 0:
        return Mask(raw=mask, group_pattern=mask[:index], operation_pattern=mask[index + 1 :])
    return Mask(raw=mask, group_pattern=mask)


def compile_mask(mask: str) -> Tuple[Optional[Pattern], Optional[Pattern]]:
    """Eagerly compile both halves of a mask.

    Literal halves yield None since they cannot fail to compile.

    Raises:
        InvalidPatternError: If either half cannot be compiled
    """
    parsed = split_mask(mask)
    group = compile_pattern(parsed.group_pattern) if has_wildcards(parsed.group_pattern) else None
    operation = None
    if parsed.has_operation and has_wildcards(parsed.operation_pattern):
        operation = compile_pattern(parsed.operation_pattern)
    return group, operation


def is_absent(name: Optional[str]) -> bool:
    """Return True for None, empty or whitespace-only names."""
    return name is None or not name.strip()


def match_item(group_name: str, operation_name: Optional[str], mask: str) -> bool:
    """Match a group/operation pair against a single mask.

    If the mask has no operation half, or the operation name is absent,
    only the group half is evaluated.

    Args:
        group_name: Owning group name
        operation_name: Friendly operation name, may be None
        mask: ``Group[.Operation]`` mask

    Returns:
        True if the mask selects this operation

    Raises:
        InvalidPatternError: If a wildcard half cannot be compiled
    """
    parsed = split_mask(mask)

    # Group mask only
    if not parsed.has_operation or is_absent(operation_name):
        return match_pattern(group_name, parsed.group_pattern)

    # Group and operation mask
    return match_pattern(group_name, parsed.group_pattern) and match_pattern(
        operation_name, parsed.operation_pattern
    )


def clear_pattern_cache() -> None:
    """Drop all cached compiled patterns."""
    compile_pattern.cache_clear()
    compile_literal.cache_clear()
