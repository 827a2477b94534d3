"""Placeholder expansion for attachment patterns using Jinja2.

Patterns such as ``"target/{{ job_name }}-*.jar, logs/{{ build_number }}/*.log"``
are expanded against the build's variables before being split into globs.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from jinja2 import Environment, StrictUndefined, TemplateError

from .exceptions import TemplateExpansionError

logger = logging.getLogger(__name__)


class TemplateExpander(ABC):
    """Expands placeholder tokens in a raw pattern string."""

    @abstractmethod
    def expand(self, raw: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """Return the raw string with placeholders replaced.

        Raises:
            TemplateExpansionError: If expansion fails
        """


class JinjaTemplateExpander(TemplateExpander):
    """Expands patterns with Jinja2.

    Undefined variables raise instead of silently expanding to an empty
    string, which would otherwise turn ``{{ typo }}*.log`` into ``*.log``.
    Compiled templates are cached by source string.

    Every pattern is parsed as a template, so a file name containing
    ``{{``, ``{%`` or ``{#`` is a syntax error and aborts the whole
    collection pass. Wrap such names in ``{% raw %}...{% endraw %}``.
    """

    def __init__(self, globals: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the Jinja2 environment.

        Args:
            globals: Variables available to every expansion (e.g. node name)
        """
        self.env = Environment(
            autoescape=False,  # Output is a file pattern, not markup
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        if globals:
            self.env.globals.update(globals)
        self._cache: Dict[str, Any] = {}

    def expand(self, raw: str, context: Optional[Mapping[str, Any]] = None) -> str:
        try:
            template = self._cache.get(raw)
            if template is None:
                template = self.env.from_string(raw)
                self._cache[raw] = template

            expanded = template.render(dict(context or {}))
            logger.debug(f"Expanded attachment pattern '{raw}' to '{expanded}'")
            return expanded

        except TemplateError as e:
            error_msg = f"Failed to expand pattern '{raw}': {e}"
            logger.error(error_msg)
            raise TemplateExpansionError(error_msg) from e
