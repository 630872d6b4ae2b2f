"""
Command templates.

A template is a shell command string with one or more "{}" markers. Each
input line replaces every marker to produce the command for that line.

No quoting or escaping is applied: an input like "a; rm -rf b" reaches the
shell verbatim. Callers are expected to template commands that are safe for
the inputs they feed in.
"""

from .errors import ConfigurationError


PLACEHOLDER = "{}"


class CommandTemplate:
    """Immutable command template. Safe to share across worker threads."""

    __slots__ = ("_template",)

    def __init__(self, template: str):
        if PLACEHOLDER not in template:
            raise ConfigurationError(
                f'could not find "{PLACEHOLDER}" in command to place inputs into: {template!r}'
            )
        object.__setattr__(self, "_template", template)

    def __setattr__(self, name, value):
        raise AttributeError("CommandTemplate is immutable")

    @property
    def template(self) -> str:
        return self._template

    def render(self, value: str) -> str:
        """Replace every placeholder with the literal input text."""
        return self._template.replace(PLACEHOLDER, value)

    def __eq__(self, other):
        if not isinstance(other, CommandTemplate):
            return NotImplemented
        return self._template == other._template

    def __hash__(self):
        return hash(self._template)

    def __repr__(self):
        return f"CommandTemplate({self._template!r})"
