"""API Visibility Core - constants and validators shared across the package.

Import specific names from submodules:
    from apivisibility.core import constants
    from apivisibility.core import validators
"""

from apivisibility.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
