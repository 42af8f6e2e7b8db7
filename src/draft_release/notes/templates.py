"""Header and footer templates with ``{{placeholder}}`` substitution."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{(\{)?\s*([^{}\s]+)\s*(\})?\}\}")

# Characters escaped in double-brace placeholders
_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "`": "&#x60;",
    "=": "&#x3D;",
}
_ESCAPE_RE = re.compile("[" + re.escape("".join(_ESCAPES)) + "]")


class TemplateError(ValueError):
    """Raised when a header or footer template cannot be compiled."""


def _escape(value: str) -> str:
    return _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group(0)], value)


def _strip_version_prefix(tag: str) -> str:
    return tag[1:] if tag.startswith("v") else tag


def parse_variables(variables: Iterable[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a mapping; entries without ``=`` get an empty value."""
    parsed: dict[str, str] = {}
    for variable in variables:
        key, _, value = variable.partition("=")
        key = key.strip()
        if not key:
            logger.warning("Ignoring template variable without a name: %r", variable)
            continue
        parsed[key] = value.strip()
    return parsed


def build_template_data(
    next_release: str, latest_release: str, variables: Iterable[str] = ()
) -> dict[str, str]:
    """Variables available to header and footer templates.

    User variables are applied last and may override the built-in ones.
    """
    data = {
        "version": next_release,
        "version-number": _strip_version_prefix(next_release),
        "previous-version": latest_release,
        "previous-version-number": _strip_version_prefix(latest_release),
    }
    data.update(parse_variables(variables))
    return data


def _check_balanced(template: str) -> None:
    remainder = _PLACEHOLDER_RE.sub("", template)
    position = remainder.find("{{")
    if position != -1:
        snippet = remainder[position : position + 20]
        raise TemplateError(f"Unterminated placeholder near {snippet!r}")


def render_template(template: str, data: Mapping[str, str]) -> str:
    """Substitute placeholders in *template*.

    ``{{name}}`` inserts the HTML-escaped value, ``{{{name}}}`` the raw value.
    Unknown names render as an empty string.

    Raises:
        TemplateError: If the template has an unterminated ``{{``.
    """
    _check_balanced(template)

    def _replace(match: re.Match[str]) -> str:
        opening, name, closing = match.groups()
        if bool(opening) != bool(closing):
            raise TemplateError(f"Mismatched braces in placeholder {match.group(0)!r}")
        value = data.get(name)
        if value is None:
            logger.debug("Template variable %s is not defined", name)
            return ""
        return value if opening else _escape(value)

    return _PLACEHOLDER_RE.sub(_replace, template)
