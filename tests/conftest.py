import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import slide_deck` works
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


SAMPLE_MARKDOWN = """# My **talk**
AUTHOR=Ada Lovelace

## Intro
Some *text* here.

* first
* second
    * nested

## Picture
![A cat](cat.png)
%WIDTH=0.5\\textwidth

## Split
before

%NEWSLIDE

after
"""


@pytest.fixture
def sample_markdown():
    return SAMPLE_MARKDOWN


@pytest.fixture
def png_file(tmp_path):
    """A small PNG image on disk."""
    from PIL import Image

    path = tmp_path / "cat.png"
    Image.new("RGB", (40, 20), color=(200, 80, 80)).save(path)
    return path
