#!/usr/bin/env python3
"""Visibility report rendering using Jinja2.

Renders a list of ``VisibilityDecision`` objects as a plain-text table or
a Markdown table, together with the mode and mask lists of the engine
that produced them.

Example:
    >>> decisions = [engine.explain("User", "GetUser")]
    >>> print(render_report(decisions, engine, fmt="markdown"))
"""

from typing import Dict, List, Optional, Sequence

import jinja2

from apivisibility.core.constants import ErrorCode
from apivisibility.rules.engine import VisibilityDecision, VisibilityRuleEngine

TEXT_TEMPLATE = """\
Mode: {{ mode }}
Visible items: {{ allow_masks | join(", ") if allow_masks else "(none)" }}
Hidden items: {{ deny_masks | join(", ") if deny_masks else "(none)" }}

{{ "OPERATION".ljust(width) }}  VISIBLE  MATCHED
{% for d in decisions %}
{{ d.label.ljust(width) }}  {{ ("yes" if d.visible else "no").ljust(7) }}  {{ d | matched }}
{% endfor %}
{{ visible_count }} visible, {{ hidden_count }} hidden
"""

MARKDOWN_TEMPLATE = """\
**Mode:** `{{ mode }}`

| Operation | Visible | Allowed by | Denied by |
|-----------|---------|------------|-----------|
{% for d in decisions %}
| `{{ d.label }}` | {{ "yes" if d.visible else "no" }} | {{ d.allow_matches | codelist }} | {{ d.deny_matches | codelist }} |
{% endfor %}

{{ visible_count }} visible, {{ hidden_count }} hidden
"""

TEMPLATES: Dict[str, str] = {
    "text": TEXT_TEMPLATE,
    "markdown": MARKDOWN_TEMPLATE,
}


class ReportError(Exception):
    """Report rendering failed."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.error_code = error_code
        super().__init__(message)


def _matched(decision: VisibilityDecision) -> str:
    parts = []
    if decision.allow_matches:
        parts.append("+" + ",".join(decision.allow_matches))
    if decision.deny_matches:
        parts.append("-" + ",".join(decision.deny_matches))
    return " ".join(parts) or "-"


def _codelist(masks: Sequence[str]) -> str:
    if not masks:
        return ""
    return ", ".join(f"`{mask}`" for mask in masks)


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["matched"] = _matched
    env.filters["codelist"] = _codelist
    return env


def render_report(
    decisions: List[VisibilityDecision],
    engine: Optional[VisibilityRuleEngine] = None,
    fmt: str = "text",
) -> str:
    """Render decisions as a report.

    Args:
        decisions: Decisions to list, in display order
        engine: Engine whose masks are shown in the header
        fmt: "text" or "markdown"

    Returns:
        Rendered report

    Raises:
        ReportError: On unknown format or template failure
    """
    if fmt not in TEMPLATES:
        raise ReportError(f"Unknown report format: {fmt}")

    visible_count = sum(1 for d in decisions if d.visible)
    context = {
        "decisions": decisions,
        "mode": engine.mode.value if engine else (decisions[0].mode.value if decisions else "none"),
        "allow_masks": list(engine.allow_masks) if engine else [],
        "deny_masks": list(engine.deny_masks) if engine else [],
        "width": max([len("OPERATION")] + [len(d.label) for d in decisions]),
        "visible_count": visible_count,
        "hidden_count": len(decisions) - visible_count,
    }

    try:
        return _environment().from_string(TEMPLATES[fmt]).render(**context)
    except jinja2.TemplateError as e:
        raise ReportError(f"Template error: {e}") from e
