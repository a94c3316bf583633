#!/usr/bin/env python3
"""FastAPI adapter for catalogue visibility.

Classifies every ``APIRoute`` of an application or router with a
``VisibilityRuleEngine`` and sets ``include_in_schema`` accordingly:
- Group: first route tag, else first static path segment, else endpoint name
- Operation: ``operation_id`` (absent when the route has none)

Only the OpenAPI catalogue changes. Routing is untouched, so hidden
routes still answer requests.

Example:
    >>> app = FastAPI()
    >>> engine = VisibilityRuleEngine(deny_masks=["User.Delete*"])
    >>> install_visibility(app, engine)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from fastapi import FastAPI
from fastapi.routing import APIRoute

from apivisibility.infrastructure.logger import get_logger
from apivisibility.rules.engine import VisibilityRuleEngine
from apivisibility.rules.patterns import InvalidPatternError

GroupResolver = Callable[[APIRoute], Optional[str]]

# Attribute remembering a route's include_in_schema as declared by the developer
DECLARED_ATTR = "_apivisibility_declared"

logger = get_logger("apivisibility.fastapi")


@dataclass(frozen=True)
class OperationDescriptor:
    """The names a host supplies for one operation."""

    group_name: str
    operation_name: Optional[str] = None
    path: Optional[str] = None

    @property
    def label(self) -> str:
        if self.operation_name:
            return f"{self.group_name}.{self.operation_name}"
        return self.group_name


@dataclass
class VisibilitySummary:
    """Result of applying visibility to a set of routes."""

    visible: List[OperationDescriptor] = field(default_factory=list)
    hidden: List[OperationDescriptor] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.visible) + len(self.hidden)


def _tag_name(tag: Any) -> str:
    if isinstance(tag, Enum):
        return str(tag.value)
    return str(tag)


def default_group_name(route: APIRoute) -> str:
    """Derive a route's group name.

    Uses the first tag, then the first non-parameter path segment, then
    the endpoint function name.
    """
    if route.tags:
        return _tag_name(route.tags[0])

    for segment in route.path.split("/"):
        if segment and not segment.startswith("{"):
            return segment

    return route.endpoint.__name__


def describe_route(route: APIRoute, group_resolver: Optional[GroupResolver] = None) -> OperationDescriptor:
    """Build the operation descriptor for a route.

    Args:
        route: FastAPI route
        group_resolver: Optional callable overriding group name derivation;
            returning None falls back to the default derivation

    Returns:
        Descriptor with group and operation names
    """
    group_name = group_resolver(route) if group_resolver else None
    if not group_name:
        group_name = default_group_name(route)

    return OperationDescriptor(
        group_name=group_name,
        operation_name=route.operation_id or None,
        path=route.path,
    )


def iter_api_routes(target: Any) -> List[APIRoute]:
    """Return every ``APIRoute`` of an app, router or route list, descending into included routers."""
    routes = getattr(target, "routes", target)
    found: List[APIRoute] = []
    for route in routes:
        if isinstance(route, APIRoute):
            found.append(route)
            continue

        # Routers added with include_router may be kept as a reference to the
        # original router instead of copies of its routes
        included = getattr(route, "original_router", None)
        if included is not None:
            found.extend(iter_api_routes(included))
    return found


def apply_visibility(
    target: Any,
    engine: VisibilityRuleEngine,
    group_resolver: Optional[GroupResolver] = None,
) -> VisibilitySummary:
    """Set ``include_in_schema`` on every API route of target.

    Routes a developer declared with ``include_in_schema=False`` stay
    hidden whatever the rules say. Routes of included routers are
    classified too; where FastAPI keeps such a router by reference, its
    route objects are shared by every app that includes it.

    Args:
        target: FastAPI app, APIRouter, or iterable of routes
        engine: Rule engine deciding visibility
        group_resolver: Optional group name override

    Returns:
        Summary of visible and hidden operations

    Raises:
        InvalidPatternError: If a configured mask cannot be compiled
    """
    summary = VisibilitySummary()

    for route in iter_api_routes(target):
        descriptor = describe_route(route, group_resolver)

        if not hasattr(route, DECLARED_ATTR):
            setattr(route, DECLARED_ATTR, route.include_in_schema)

        try:
            visible = engine.is_visible(descriptor.group_name, descriptor.operation_name)
        except InvalidPatternError as e:
            logger.error(
                "Invalid visibility mask",
                pattern=e.pattern,
                group=descriptor.group_name,
                operation=descriptor.operation_name,
            )
            raise

        route.include_in_schema = visible and getattr(route, DECLARED_ATTR)

        if route.include_in_schema:
            summary.visible.append(descriptor)
        else:
            summary.hidden.append(descriptor)
            logger.debug("Route hidden from catalogue", operation=descriptor.label, path=route.path)

    # Force the catalogue to be rebuilt with the new flags
    if isinstance(target, FastAPI):
        target.openapi_schema = None

    logger.info(
        "Visibility applied",
        mode=engine.mode.value,
        visible=len(summary.visible),
        hidden=len(summary.hidden),
    )
    return summary


def install_visibility(
    app: FastAPI,
    engine: VisibilityRuleEngine,
    group_resolver: Optional[GroupResolver] = None,
) -> VisibilitySummary:
    """Apply visibility now and again whenever the catalogue is rebuilt.

    Routes registered after installation are classified on the next
    ``app.openapi()`` call that builds the schema.

    Returns:
        Summary for the routes present at installation time
    """
    build_openapi = app.openapi

    def openapi():
        if app.openapi_schema is None:
            apply_visibility(app, engine, group_resolver)
        return build_openapi()

    app.openapi = openapi
    return apply_visibility(app, engine, group_resolver)
