"""Theme loader for terminal slide rendering."""
from dataclasses import dataclass, field
from typing import Dict, List

from rich.style import Style

ROLES = (
    "heading",
    "body",
    "accent",
    "code",
    "code_fence",
    "dimmed",
    "rule",
    "list_marker",
    "blockquote_border",
    "table_border",
    "emphasis",
    "strong",
    "link",
    "admonition_note",
    "admonition_tip",
    "admonition_warning",
    "admonition_danger",
    "admonition_success",
    "admonition_info",
)


@dataclass(frozen=True)
class Theme:
    """
    Named set of style roles.

    ``colors`` maps each role to a color understood by rich (``#rrggbb`` or a
    named color).  A role missing from the mapping renders unstyled.
    """
    name: str
    colors: Dict[str, str] = field(default_factory=dict)
    heading_bold: bool = True
    code_theme: str = "monokai"

    def style(self, role: str, bold: bool = False) -> Style:
        """Return the rich style for *role*, optionally bold."""
        color = self.colors.get(role)
        return Style(color=color or None, bold=bold or None)


_DARK = {
    "heading": "#61afef",
    "body": "#dcdfe4",
    "accent": "#e5c07b",
    "code": "#98c379",
    "code_fence": "#5c6370",
    "dimmed": "#7f848e",
    "rule": "#4b5263",
    "list_marker": "#e5c07b",
    "blockquote_border": "#5c6370",
    "table_border": "#5c6370",
    "emphasis": "#c678dd",
    "strong": "#e06c75",
    "link": "#56b6c2",
    "admonition_note": "#61afef",
    "admonition_tip": "#98c379",
    "admonition_warning": "#e5c07b",
    "admonition_danger": "#e06c75",
    "admonition_success": "#98c379",
    "admonition_info": "#56b6c2",
}

_LIGHT = {
    "heading": "#0550ae",
    "body": "#24292f",
    "accent": "#953800",
    "code": "#116329",
    "code_fence": "#6e7781",
    "dimmed": "#6e7781",
    "rule": "#afb8c1",
    "list_marker": "#953800",
    "blockquote_border": "#afb8c1",
    "table_border": "#8c959f",
    "emphasis": "#8250df",
    "strong": "#cf222e",
    "link": "#0969da",
    "admonition_note": "#0969da",
    "admonition_tip": "#1a7f37",
    "admonition_warning": "#9a6700",
    "admonition_danger": "#cf222e",
    "admonition_success": "#1a7f37",
    "admonition_info": "#0550ae",
}

_DRACULA = {
    "heading": "#bd93f9",
    "body": "#f8f8f2",
    "accent": "#ffb86c",
    "code": "#50fa7b",
    "code_fence": "#6272a4",
    "dimmed": "#6272a4",
    "rule": "#44475a",
    "list_marker": "#ff79c6",
    "blockquote_border": "#6272a4",
    "table_border": "#6272a4",
    "emphasis": "#f1fa8c",
    "strong": "#ff79c6",
    "link": "#8be9fd",
    "admonition_note": "#8be9fd",
    "admonition_tip": "#50fa7b",
    "admonition_warning": "#ffb86c",
    "admonition_danger": "#ff5555",
    "admonition_success": "#50fa7b",
    "admonition_info": "#bd93f9",
}

# Built-in themes; "default" is the dark palette
_BUILTIN_THEMES = {
    "default": Theme("default", _DARK, heading_bold=True, code_theme="monokai"),
    "dark": Theme("dark", _DARK, heading_bold=True, code_theme="monokai"),
    "light": Theme("light", _LIGHT, heading_bold=True, code_theme="friendly"),
    "dracula": Theme("dracula", _DRACULA, heading_bold=False, code_theme="dracula"),
}


def get_theme(theme: str = "default") -> Theme:
    """
    Look up a built-in theme.

    Args:
        theme: Theme name (default, dark, light, dracula)

    Returns:
        The Theme value

    Raises:
        ValueError: If the theme name is invalid or no such theme exists
    """
    if not theme or not theme.replace("_", "").replace("-", "").isalnum():
        raise ValueError(f"Invalid theme name: {theme}")

    found = _BUILTIN_THEMES.get(theme.lower())
    if found is None:
        raise ValueError(
            f"Theme '{theme}' not found. Available themes: {list_available_themes()}"
        )
    return found


def list_available_themes() -> List[str]:
    """
    List all available themes.

    Returns:
        List of theme names
    """
    return sorted(_BUILTIN_THEMES)


def validate_theme(theme: str) -> bool:
    """
    Check if a theme exists.

    Args:
        theme: Theme name to validate

    Returns:
        True if theme exists, False otherwise
    """
    try:
        get_theme(theme)
        return True
    except ValueError:
        return False
