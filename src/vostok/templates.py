"""Built-in gemtext pages with {{placeholder}} substitution."""

from dataclasses import dataclass

NEW_TAB_TEMPLATE = """\
# New Tab

Welcome to Vostok, a browser for Geminispace.

Type an address in the address bar to get started.

=> gemini://geminiprotocol.net/ Project Gemini
=> gemini://geminiprotocol.net/docs/ Gemini documentation
=> gemini://kennedy.gemi.dev/ Kennedy search
"""

ERROR_TEMPLATE = """\
# Error {{status}}

{{message}}

=> about://new Back to a new tab
"""


@dataclass(frozen=True)
class PageTemplates:
    """Gemtext sources for the browser's own pages."""

    new_tab: str = NEW_TAB_TEMPLATE
    error: str = ERROR_TEMPLATE


def render(template: str, **values) -> str:
    """Replace each {{name}} with its value. No other templating."""
    for name, value in values.items():
        template = template.replace("{{" + name + "}}", str(value))
    return template
