"""apivisibility - catalogue visibility rules for API operations.

Decides, per ``(group, operation)`` pair, whether an operation is
advertised in a generated interface catalogue such as OpenAPI docs.
Visibility never changes whether an operation can be called.
"""

from apivisibility.core.constants import APIVISIBILITY_VERSION, VisibilityMode
from apivisibility.infrastructure.config_manager import ApiConfiguration, ConfigError, ConfigManager
from apivisibility.rules.engine import MissingGroupNameError, VisibilityDecision, VisibilityRuleEngine
from apivisibility.rules.patterns import InvalidPatternError, match_item, match_pattern

__version__ = APIVISIBILITY_VERSION

__all__ = [
    "ApiConfiguration",
    "ConfigError",
    "ConfigManager",
    "InvalidPatternError",
    "MissingGroupNameError",
    "VisibilityDecision",
    "VisibilityMode",
    "VisibilityRuleEngine",
    "match_item",
    "match_pattern",
    "__version__",
]
