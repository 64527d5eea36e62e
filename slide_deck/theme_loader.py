"""CSS themes for PPTX output.

Themes are plain ``.css`` files shipped in ``slide_deck/themes``.  Only the
``:root`` custom properties and a handful of element rules are read; see
:class:`slide_deck.pptx_renderer.PPTXRenderer` for what is consumed.
"""
import re
from pathlib import Path
from typing import List

THEMES_DIR = Path(__file__).parent / "themes"

# Theme names double as file names
_THEME_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")


def theme_path(theme: str) -> Path:
    """Location of *theme* on disk.

    Raises:
        ValueError: If the name could escape the themes directory
    """
    if not _THEME_NAME_RE.fullmatch(theme):
        raise ValueError(f"Invalid theme name: {theme!r}")
    return THEMES_DIR / f"{theme}.css"


def get_css(theme: str = "default") -> str:
    """
    Load the stylesheet for a theme.

    Args:
        theme: Theme name, e.g. ``default`` or ``dark``

    Returns:
        CSS content as string

    Raises:
        FileNotFoundError: If no stylesheet exists for the theme
        ValueError: If theme name is invalid
    """
    path = theme_path(theme)
    if not path.is_file():
        raise FileNotFoundError(
            f"Theme '{theme}' not found. Available themes: {list_available_themes()}"
        )
    return path.read_text(encoding="utf-8")


def list_available_themes() -> List[str]:
    """Sorted names of the bundled themes."""
    if not THEMES_DIR.exists():
        return []
    return sorted(f.stem for f in THEMES_DIR.glob("*.css") if f.is_file())


def validate_theme(theme: str) -> bool:
    """True when *theme* names a bundled, loadable stylesheet."""
    try:
        theme_path(theme)
    except ValueError:
        return False
    return theme in list_available_themes()
