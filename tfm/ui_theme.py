"""UI themes: named styles mapped to ANSI SGR sequences.

Renderers only tag text with style names; this module turns a tagged row into
terminal output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .styled import Segment

LOGGER = logging.getLogger(__name__)

RESET = "\033[0m"

STYLE_NAMES = (
    "header",
    "status",
    "directory",
    "selected",
    "normal",
    "error",
    "divider",
    "syntax.keyword",
    "syntax.string",
    "syntax.comment",
    "syntax.number",
    "syntax.name",
    "syntax.operator",
)


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette keyed by style name."""

    name: str
    styles: Mapping[str, str] = field(default_factory=dict)

    def sgr(self, style: str) -> str:
        return self.styles.get(style, "")

    def paint(self, line: Iterable[Segment]) -> str:
        """Render one styled row as terminal text, resetting after styled runs."""
        out: list[str] = []
        for segment in line:
            if segment.raw:
                out.append(segment.text)
                continue
            code = self.sgr(segment.style)
            if code:
                out.append(f"{code}{segment.text}{RESET}")
            else:
                out.append(segment.text)
        return "".join(out)


DEFAULT_THEME = UITheme(
    name="default",
    styles={
        "header": "\033[1;38;5;81m",
        "status": "\033[7m",
        "directory": "\033[1;34m",
        "selected": "\033[7;1m",
        "normal": "",
        "error": "\033[1;38;5;203m",
        "divider": "\033[2m",
        "syntax.keyword": "\033[38;5;204m",
        "syntax.string": "\033[38;5;186m",
        "syntax.comment": "\033[2;38;5;245m",
        "syntax.number": "\033[38;5;141m",
        "syntax.name": "\033[38;5;81m",
        "syntax.operator": "\033[38;5;229m",
    },
)

OCEAN_THEME = UITheme(
    name="ocean",
    styles={
        "header": "\033[1;38;5;45m",
        "status": "\033[38;5;153;48;5;24m",
        "directory": "\033[1;38;5;45m",
        "selected": "\033[1;38;5;231;48;5;31m",
        "normal": "",
        "error": "\033[1;38;5;215m",
        "divider": "\033[2;38;5;31m",
        "syntax.keyword": "\033[38;5;39m",
        "syntax.string": "\033[38;5;117m",
        "syntax.comment": "\033[2;38;5;110m",
        "syntax.number": "\033[38;5;153m",
        "syntax.name": "\033[38;5;45m",
        "syntax.operator": "\033[38;5;73m",
    },
)

PLAIN_THEME = UITheme(name="plain", styles={"selected": "\033[7m", "status": "\033[7m"})

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def _color_params(value: object, *, background: bool) -> list[str]:
    """Translate ``"#rrggbb"`` or a 0-255 palette index into SGR params."""
    base = "48" if background else "38"
    text = str(value).strip()
    if text.startswith("#") and len(text) == 7:
        try:
            red, green, blue = (int(text[i : i + 2], 16) for i in (1, 3, 5))
        except ValueError:
            return []
        return [base, "2", str(red), str(green), str(blue)]
    if text.isdigit() and 0 <= int(text) <= 255:
        return [base, "5", text]
    return []


def style_sgr(spec: Mapping[str, object]) -> str:
    """Build an SGR sequence from ``{fg, bg, bold, faint, reverse}``."""
    params: list[str] = []
    if spec.get("bold") is True:
        params.append("1")
    if spec.get("faint") is True:
        params.append("2")
    if spec.get("reverse") is True:
        params.append("7")
    if "fg" in spec:
        params.extend(_color_params(spec["fg"], background=False))
    if "bg" in spec:
        params.extend(_color_params(spec["bg"], background=True))
    if not params:
        return ""
    return f"\033[{';'.join(params)}m"


def resolve_theme(
    name: str | None,
    *,
    no_color: bool = False,
    overrides: Mapping[str, Mapping[str, object]] | None = None,
) -> UITheme:
    """Return concrete theme for requested name, color mode and overrides."""
    if no_color:
        return PLAIN_THEME
    base = _THEMES.get(normalize_theme_name(name), DEFAULT_THEME)
    if not overrides:
        return base
    styles = dict(base.styles)
    for style, spec in overrides.items():
        if style not in STYLE_NAMES or not isinstance(spec, Mapping):
            LOGGER.warning("ignoring style override for %r", style)
            continue
        styles[style] = style_sgr(spec)
    return UITheme(name=base.name, styles=styles)


__all__ = [
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "RESET",
    "STYLE_NAMES",
    "UITheme",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
    "style_sgr",
]
