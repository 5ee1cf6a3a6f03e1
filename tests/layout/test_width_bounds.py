#!/usr/bin/env python3
"""
Width bounds - every rendered line must fit the target width whenever the
content's words fit.
"""

import re

import pytest
from slide_deck.highlighter import SyntaxHighlighter
from slide_deck.layout_engine import calculate_column_widths, wrap_text
from slide_deck.markdown_parser import parse
from slide_deck.models import Table, TextSpan
from slide_deck.text_renderer import TextRenderer

ANSI = re.compile(r"\x1b\[[0-9;]*m")

TEXT = (
    "Slides are rendered line by line and every line has to respect the "
    "width the caller asked for so that boxes and tables stay aligned"
)

DECK = f"""# A heading that is long enough to need wrapping at narrow widths

{TEXT}

- {TEXT}
  - nested {TEXT}
    1. deeper {TEXT}

> {TEXT}
>
> - quoted list {TEXT}

| Column one | Column two is wider | Three |
|:-----------|:-------------------:|------:|
| {TEXT[:60]} | short | 3 |
| a | b | c |

:::warning Mind the gap
{TEXT}

- inside the box
:::

```python
def render(slides, width):
    return [line for slide in slides for line in slide.layout(width) if line]
```

![a diagram of the whole rendering pipeline with every stage labelled](img/pipeline.png)

***
"""

WIDTHS = [24, 40, 60, 80, 120]


@pytest.mark.parametrize("width", WIDTHS)
def test_wrap_respects_width(width):
    for line in wrap_text(TEXT * 3, width):
        assert len(line) <= width


@pytest.mark.parametrize("width", WIDTHS)
def test_rendered_deck_fits_width(theme, width):
    renderer = TextRenderer(theme, width=width, highlighter=SyntaxHighlighter(theme.code_theme))
    output = ANSI.sub("", renderer.render_to_string(parse(DECK).slides))

    for line in output.split("\n"):
        assert len(line) <= width, line


@pytest.mark.parametrize("width", [20, 40, 80])
@pytest.mark.parametrize("columns", [1, 2, 3, 5])
def test_over_wide_table_columns(width, columns):
    headers = tuple((TextSpan("h" * (40 + col * 7)),) for col in range(columns))
    table = Table(headers, (), ())
    widths = calculate_column_widths(table, width)

    assert len(widths) == columns
    assert sum(widths) <= width
    assert all(w >= 3 for w in widths)


def test_slide_separator_is_full_width(theme):
    renderer = TextRenderer(theme, width=50)
    output = ANSI.sub("", renderer.render_to_string(parse("# A\n\n---\n\n# B").slides))

    assert "═" * 50 in output.split("\n")
