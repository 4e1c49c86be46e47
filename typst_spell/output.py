"""Rendering of diagnostics as plain lines, annotated snippets or JSON.

Plain output is one line per unknown word, meant for regular expressions
in editors and CI:

    chapter.typ 3:5-3:9 info word, ward, wore

Pretty output shows the word in its line with the suggestions underneath:

    info: Unknown word
     --> chapter.typ:3:5
      |
    3 | The wrod is here.
      |     ^^^^
      |     ---- help: word
"""

import json

from rich.console import Console
from rich.text import Text

from typst_spell.checker import Diagnostic
from typst_spell.config import Style

CONTEXT_STOPS = frozenset("\n\t\r")


def format_plain(diagnostic: Diagnostic) -> str:
    """Format a diagnostic as a single line."""
    return (
        f"{diagnostic.path} "
        f"{diagnostic.line_start}:{diagnostic.column_start}-"
        f"{diagnostic.line_end}:{diagnostic.column_end} "
        f"info {', '.join(diagnostic.suggestions)}"
    )


def format_json(diagnostic: Diagnostic) -> str:
    """Format a diagnostic as a single-line JSON object."""
    return json.dumps(diagnostic.to_dict(), ensure_ascii=False)


def context_window(text: str, start: int, end: int, context_length: int) -> tuple[int, int]:
    """Find the excerpt of ``text`` shown around ``text[start:end]``.

    The excerpt extends up to ``context_length`` characters to each side of
    the range and never past a newline, tab or carriage return. Offsets are
    character offsets, so the excerpt never splits a multi-byte character.

    Args:
        text: Full document text
        start: Character offset of the range start
        end: Character offset just past the range
        context_length: Maximum characters of context per side

    Returns:
        (window_start, window_end) character offsets into ``text``
    """
    window_start = 0
    for count, index in enumerate(range(start - 1, -1, -1)):
        if text[index] in CONTEXT_STOPS or count >= context_length:
            window_start = index + 1
            break

    window_end = len(text)
    for count, index in enumerate(range(end, len(text))):
        if text[index] in CONTEXT_STOPS or count >= context_length:
            window_end = index
            break

    return window_start, window_end


def render_pretty(diagnostic: Diagnostic, text: str, context_length: int) -> Text:
    """Render a diagnostic as an annotated snippet.

    Args:
        diagnostic: The diagnostic to render
        text: Full text of the document the diagnostic belongs to
        context_length: Maximum characters of context per side

    Returns:
        Styled rich Text, ready for ``Console.print``
    """
    window_start, window_end = context_window(
        text, diagnostic.start, diagnostic.end, context_length
    )
    excerpt = text[window_start:window_end]
    # Position of the word within the excerpt, in characters
    offset = diagnostic.start - window_start
    width = max(diagnostic.end - diagnostic.start, 1)

    line_number = str(diagnostic.line_start)
    margin = " " * len(line_number)
    gutter = f"{margin} | "

    snippet = Text()
    snippet.append("info", style="bold blue")
    snippet.append(": Unknown word\n", style="bold")
    snippet.append(f"{margin}--> ", style="bold blue")
    snippet.append(f"{diagnostic.path}:{diagnostic.line_start}:{diagnostic.column_start}\n")
    snippet.append(f"{margin} |\n", style="bold blue")
    snippet.append(f"{line_number} | ", style="bold blue")
    snippet.append(f"{excerpt}\n")
    snippet.append(gutter, style="bold blue")
    snippet.append(" " * offset + "^" * width, style="bold blue")
    for suggestion in diagnostic.suggestions:
        snippet.append("\n")
        snippet.append(gutter, style="bold blue")
        snippet.append(" " * offset + "-" * width + " help: ", style="bold cyan")
        snippet.append(suggestion)
    return snippet


class Reporter:
    """Diagnostic sink that prints to a rich console in one output style.

    Attributes:
        style: "pretty", "plain" or "json"
        context_length: Characters of context per side in pretty mode
        console: Console the output is written to
    """

    def __init__(self, style: Style = "pretty", context_length: int = 80, console: Console | None = None):
        """Initialize the reporter.

        Raises:
            ValueError: If style is unknown or context_length is negative
        """
        if style not in ("pretty", "plain", "json"):
            msg = f"Unknown output style: {style}"
            raise ValueError(msg)
        if context_length < 0:
            msg = "context_length cannot be negative"
            raise ValueError(msg)

        self.style = style
        self.context_length = context_length
        self.console = console or Console()

    def begin(self) -> None:
        """Mark the start of one document's output."""
        if self.style == "plain":
            self._print_line("START")

    def end(self) -> None:
        """Mark the end of one document's output."""
        if self.style == "plain":
            self._print_line("END")

    def report(self, diagnostic: Diagnostic, text: str) -> None:
        """Print one diagnostic of the document whose full text is ``text``."""
        if self.style == "plain":
            self._print_line(format_plain(diagnostic))
        elif self.style == "json":
            self._print_line(format_json(diagnostic))
        else:
            self.console.print(
                render_pretty(diagnostic, text, self.context_length),
                soft_wrap=True,
                highlight=False,
            )
            self.console.print()

    def _print_line(self, line: str) -> None:
        self.console.print(line, markup=False, emoji=False, highlight=False, soft_wrap=True)
