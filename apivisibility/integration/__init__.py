"""Host framework adapters.

Adapters enumerate a framework's operations, ask the rule engine about
each one, and set the framework's own catalogue flag. They never change
how requests are routed.
"""

from .fastapi_adapter import (
    OperationDescriptor,
    VisibilitySummary,
    apply_visibility,
    default_group_name,
    describe_route,
    install_visibility,
    iter_api_routes,
)

__all__ = [
    "OperationDescriptor",
    "VisibilitySummary",
    "apply_visibility",
    "default_group_name",
    "describe_route",
    "install_visibility",
    "iter_api_routes",
]
