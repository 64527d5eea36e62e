"""Test theme loader functionality."""

import pytest

from slide_deck.pptx_renderer import COLOR_PATTERNS, FONT_SIZE_PATTERNS, PPTXRenderer
from slide_deck.theme_loader import get_css, list_available_themes, theme_path, validate_theme


def test_get_css_default():
    """Test that default theme loads and returns CSS content."""
    css = get_css("default")

    assert isinstance(css, str)
    assert ":root" in css
    assert "--slide-width" in css
    assert "font-family" in css


def test_get_css_dark():
    """Test that dark theme loads and returns CSS content."""
    css = get_css("dark")

    assert ".slide" in css
    assert "#1a1a1a" in css  # Dark background color
    assert css != get_css("default")


def test_get_css_invalid_theme():
    """Test that invalid theme names raise appropriate errors."""
    # Non-existent theme
    with pytest.raises(FileNotFoundError):
        get_css("nonexistent")

    # Invalid characters (path traversal attempt)
    with pytest.raises(ValueError):
        get_css("../evil")

    with pytest.raises(ValueError):
        get_css("theme/../../evil")

    with pytest.raises(ValueError):
        get_css("")


def test_theme_path():
    assert theme_path("dark").name == "dark.css"
    assert theme_path("dark").parent.name == "themes"


def test_list_available_themes():
    """Test that list_available_themes returns the bundled themes, sorted."""
    themes = list_available_themes()

    assert "default" in themes
    assert "dark" in themes
    assert themes == sorted(themes)


def test_validate_theme():
    """Test theme validation function."""
    assert validate_theme("default") is True
    assert validate_theme("dark") is True

    assert validate_theme("nonexistent") is False
    assert validate_theme("../evil") is False


@pytest.mark.parametrize("theme", list_available_themes())
def test_bundled_themes_are_complete(theme):
    """Every bundled theme defines what the PPTX renderer reads."""
    import re

    css = get_css(theme)
    for element, pattern in FONT_SIZE_PATTERNS.items():
        assert re.search(pattern, css, re.IGNORECASE | re.DOTALL), f"{theme}: no font-size for {element}"
    for color_type, pattern in COLOR_PATTERNS.items():
        assert re.search(pattern, css, re.IGNORECASE | re.DOTALL), f"{theme}: no color for {color_type}"

    config = PPTXRenderer(theme=theme).theme_config
    assert config['slide_dimensions']['width_px'] == 1280
    assert config['line_height'] == 1.2


def test_incomplete_theme_is_rejected(tmp_path, monkeypatch):
    import slide_deck.theme_loader as theme_loader

    (tmp_path / "broken.css").write_text("body { color: #000000; }", encoding="utf-8")
    monkeypatch.setattr(theme_loader, "THEMES_DIR", tmp_path)

    with pytest.raises(ValueError, match="missing required font-size"):
        PPTXRenderer(theme="broken")
