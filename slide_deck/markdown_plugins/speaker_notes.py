from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock

NOTES_MARKER = "???"
NOTES_TOKEN = "speaker_notes"


def speaker_notes_plugin(md: MarkdownIt):
    """Markdown-it-py plugin that turns a line beginning with `???` into a
    `speaker_notes` token.  Text after the marker and every following line up
    to the end of the slide become the token content, so the block parser can
    store it as the slide's notes instead of rendering it.
    """

    def _notes_block(state: StateBlock, start_line: int, end_line: int, silent: bool):
        # Four or more spaces of indent is an indented code block
        if state.sCount[start_line] - state.blkIndent >= 4:
            return False

        src = state.src
        line_start = state.bMarks[start_line] + state.tShift[start_line]
        max_pos = state.eMarks[start_line]

        if not src.startswith(NOTES_MARKER, line_start):
            return False

        if silent:
            return True

        parts = [src[line_start + len(NOTES_MARKER):max_pos].strip()]
        if start_line + 1 < end_line:
            parts.append(state.getLines(start_line + 1, end_line, state.blkIndent, False))

        token = state.push(NOTES_TOKEN, '', 0)
        token.content = "\n".join(part for part in parts if part.strip()).strip()
        token.map = [start_line, end_line]
        token.block = True

        state.line = end_line
        return True

    # Insert before paragraph rule so it captures lines first, and let it end
    # a paragraph that runs straight into the marker
    md.block.ruler.before('paragraph', NOTES_TOKEN, _notes_block, {"alt": ["paragraph"]})
