#!/usr/bin/env python3
"""Visibility rule engine for interface catalogue entries.

This module decides whether a ``(group, operation)`` pair is advertised
in a generated catalogue:
- Allow-list (``VisibleItems``) and deny-list (``HiddenItems``) masks
- Three-way precedence: include, exclude and mixed modes
- Default-visible when nothing is configured
- Diagnostic explanations of each decision

Visibility only controls advertising. An operation hidden from the
catalogue stays reachable by any client that knows its address.

Example:
    >>> engine = VisibilityRuleEngine(
    ...     allow_masks=["*.Get*"],
    ...     deny_masks=["User.Get*"],
    ... )
    >>> engine.is_visible("WeatherForecast", "GetWeatherForecast")
    True
    >>> engine.is_visible("User", "GetUser")
    False
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from apivisibility.core.constants import ErrorCode, VisibilityMode
from apivisibility.infrastructure.logger import Logger, get_logger
from apivisibility.rules.patterns import match_item

if TYPE_CHECKING:
    from apivisibility.infrastructure.config_manager import ApiConfiguration


class MissingGroupNameError(ValueError):
    """Raised when a decision is requested without a group name."""

    def __init__(
        self, message: str = "Group name is required", error_code: ErrorCode = ErrorCode.INVALID_INPUT
    ):
        self.error_code = error_code
        super().__init__(message)


@dataclass(frozen=True)
class VisibilityDecision:
    """Outcome of a single visibility evaluation with its evidence."""

    group_name: str
    operation_name: Optional[str]
    visible: bool
    mode: VisibilityMode
    allow_matches: Tuple[str, ...] = field(default_factory=tuple)
    deny_matches: Tuple[str, ...] = field(default_factory=tuple)
    deny_consulted: bool = False

    @property
    def label(self) -> str:
        """``Group.Operation`` or just ``Group`` when the operation is unnamed."""
        if self.operation_name:
            return f"{self.group_name}.{self.operation_name}"
        return self.group_name


def _freeze(masks: Optional[Iterable[str]], field_name: str) -> Tuple[str, ...]:
    if masks is None:
        return ()
    if isinstance(masks, str):
        raise TypeError(f"{field_name} must be an iterable of masks, not a single string")

    frozen = tuple(masks)
    for mask in frozen:
        if not isinstance(mask, str):
            raise TypeError(f"{field_name} entries must be strings, got {type(mask).__name__}")
    return frozen


class VisibilityRuleEngine:
    """Stateless classifier over two immutable mask lists.

    Precedence:
    1. Allow-list configured → visible iff some allow mask matches
    2. Deny-list configured:
       - with allow-list: an allowed item is hidden if some deny mask
         matches; an item the allow-list rejected stays hidden
       - without allow-list: visible iff no deny mask matches
    3. Neither configured → visible

    Instances are safe to share across threads: masks are stored as
    tuples and compiled patterns live in a thread-safe cache.
    """

    def __init__(
        self,
        allow_masks: Optional[Iterable[str]] = None,
        deny_masks: Optional[Iterable[str]] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize rule engine.

        Masks are not validated here; an invalid pattern raises
        ``InvalidPatternError`` from the first decision that evaluates it.

        Args:
            allow_masks: Masks of operations to advertise (``VisibleItems``)
            deny_masks: Masks of operations to hide (``HiddenItems``)
            logger: Optional logger (defaults to ``apivisibility.engine``)
        """
        self._allow_masks = _freeze(allow_masks, "allow_masks")
        self._deny_masks = _freeze(deny_masks, "deny_masks")
        self._logger = logger or get_logger("apivisibility.engine")

        self._logger.info(
            "Visibility rules loaded",
            mode=self.mode.value,
            allow=len(self._allow_masks),
            deny=len(self._deny_masks),
        )

    @classmethod
    def from_config(
        cls, configuration: "ApiConfiguration", logger: Optional[Logger] = None
    ) -> "VisibilityRuleEngine":
        """Build an engine from a resolved ``ApiConfiguration``."""
        return cls(
            allow_masks=configuration.visible_items,
            deny_masks=configuration.hidden_items,
            logger=logger,
        )

    @property
    def allow_masks(self) -> Tuple[str, ...]:
        """Configured allow masks."""
        return self._allow_masks

    @property
    def deny_masks(self) -> Tuple[str, ...]:
        """Configured deny masks."""
        return self._deny_masks

    @property
    def mode(self) -> VisibilityMode:
        """Evaluation mode implied by which lists are non-empty."""
        if self._allow_masks and self._deny_masks:
            return VisibilityMode.MIXED
        if self._allow_masks:
            return VisibilityMode.INCLUDE
        if self._deny_masks:
            return VisibilityMode.EXCLUDE
        return VisibilityMode.NONE

    def is_visible(self, group_name: str, operation_name: Optional[str] = None) -> bool:
        """Determine if an operation should be advertised.

        Args:
            group_name: Owning group (controller) name, required
            operation_name: Friendly operation name, may be None

        Returns:
            True if the operation should appear in the catalogue

        Raises:
            MissingGroupNameError: If group_name is None, empty or blank
            InvalidPatternError: If an evaluated mask cannot be compiled
        """
        self._check_group_name(group_name)

        visible = True

        # visible
        if self._allow_masks:
            visible = self._any_match(self._allow_masks, group_name, operation_name)

        # hidden
        if self._deny_masks:
            if self._allow_masks:
                # exclude from visible
                if visible:
                    visible = not self._any_match(self._deny_masks, group_name, operation_name)
            else:
                visible = not self._any_match(self._deny_masks, group_name, operation_name)

        self._logger.debug(
            "Visibility decided",
            group=group_name,
            operation=operation_name,
            visible=visible,
        )
        return visible

    def explain(self, group_name: str, operation_name: Optional[str] = None) -> VisibilityDecision:
        """Evaluate an operation and report which masks took part.

        Unlike ``is_visible`` this evaluates every mask in both lists, so
        the matches are complete even where ``is_visible`` short-circuits.
        The ``visible`` field always equals ``is_visible``, but a broken
        mask that ``is_visible`` would skip still raises here.

        Args:
            group_name: Owning group (controller) name, required
            operation_name: Friendly operation name, may be None

        Returns:
            Decision with matched allow and deny masks
        """
        allow_hits, deny_hits = self.get_matching_masks(group_name, operation_name)

        visible = bool(allow_hits) if self._allow_masks else True
        deny_consulted = bool(self._deny_masks) and visible
        if deny_consulted:
            visible = not deny_hits

        return VisibilityDecision(
            group_name=group_name,
            operation_name=operation_name,
            visible=visible,
            mode=self.mode,
            allow_matches=tuple(allow_hits),
            deny_matches=tuple(deny_hits),
            deny_consulted=deny_consulted,
        )

    def get_matching_masks(
        self, group_name: str, operation_name: Optional[str] = None
    ) -> Tuple[List[str], List[str]]:
        """Get the allow and deny masks that match an operation.

        Returns:
            Tuple of (matching allow masks, matching deny masks)
        """
        self._check_group_name(group_name)

        allow_hits = [m for m in self._allow_masks if match_item(group_name, operation_name, m)]
        deny_hits = [m for m in self._deny_masks if match_item(group_name, operation_name, m)]
        return allow_hits, deny_hits

    @staticmethod
    def _any_match(masks: Tuple[str, ...], group_name: str, operation_name: Optional[str]) -> bool:
        return any(match_item(group_name, operation_name, mask) for mask in masks)

    @staticmethod
    def _check_group_name(group_name: Optional[str]) -> None:
        if group_name is None or not isinstance(group_name, str) or not group_name.strip():
            raise MissingGroupNameError()

    def __len__(self) -> int:
        """Return total number of configured masks."""
        return len(self._allow_masks) + len(self._deny_masks)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(allow_masks={list(self._allow_masks)!r}, "
            f"deny_masks={list(self._deny_masks)!r})"
        )
