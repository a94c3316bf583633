"""Visibility Rules System.

This module provides catalogue visibility rules and mask matching:
- Mask helpers: wildcard translation and ``Group[.Operation]`` matching
- VisibilityRuleEngine: allow/deny precedence over two mask lists

Rules only decide whether an operation is advertised in a generated
catalogue; they never affect whether it can be invoked.
"""

from apivisibility.core.constants import VisibilityMode

from .engine import MissingGroupNameError, VisibilityDecision, VisibilityRuleEngine
from .patterns import (
    InvalidPatternError,
    Mask,
    clear_pattern_cache,
    compile_literal,
    compile_mask,
    compile_pattern,
    has_wildcards,
    match_item,
    match_pattern,
    split_mask,
    translate_wildcard,
)

__all__ = [
    # Pattern matching
    "InvalidPatternError",
    "Mask",
    "clear_pattern_cache",
    "compile_literal",
    "compile_mask",
    "compile_pattern",
    "has_wildcards",
    "match_item",
    "match_pattern",
    "split_mask",
    "translate_wildcard",
    # Rule engine
    "MissingGroupNameError",
    "VisibilityDecision",
    "VisibilityMode",
    "VisibilityRuleEngine",
]
