"""Position tracking and diagnostic creation for one document pass.

The tree walker feeds the ``Checker`` a stream of ``skip`` and ``check``
calls that together cover the document exactly once, in order. The checker
keeps the cursor, line and column in step with that stream, asks the
dictionary about every checked word and hands each misspelling to a sink.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass

from loguru import logger

from typst_spell.dictionary import Dictionary


@dataclass(frozen=True)
class Diagnostic:
    """One unknown word with its position and replacement candidates.

    Lines and columns are 1-based; the end position is the one just past the
    word. ``start``/``end`` are character offsets into the document text and
    ``byte_start``/``byte_end`` the same range in its UTF-8 encoding.
    """

    path: str
    word: str
    line_start: int
    column_start: int
    line_end: int
    column_end: int
    start: int
    end: int
    byte_start: int
    byte_end: int
    suggestions: tuple[str, ...]

    @property
    def byte_range(self) -> tuple[int, int]:
        return self.byte_start, self.byte_end

    def to_dict(self) -> dict:
        """Return the diagnostic as a JSON-serialisable dictionary."""
        data = asdict(self)
        data["suggestions"] = list(self.suggestions)
        return data


class Checker:
    """Cursor over a document that checks or skips consecutive spans.

    Attributes:
        dictionary: Oracle answering validity and suggestion queries
        text: Full document text
        path: Document identifier used in diagnostics
        cursor: Character offset of the next unprocessed character
        byte_offset: UTF-8 byte offset matching ``cursor``
        line: 1-based line at ``cursor``
        column: 1-based column (in characters) at ``cursor``
        diagnostics_count: Number of diagnostics emitted so far
    """

    def __init__(
        self,
        dictionary: Dictionary,
        text: str,
        path: str,
        on_diagnostic: Callable[[Diagnostic], None],
    ):
        """Initialize a checker at the start of ``text``.

        Args:
            dictionary: Dictionary used for every query of this pass
            text: Document text
            path: Document identifier (usually the file path)
            on_diagnostic: Sink called once per misspelling, in document order
        """
        self.dictionary = dictionary
        self.text = text
        self.path = path
        self.on_diagnostic = on_diagnostic

        self.cursor = 0
        self.byte_offset = 0
        self.line = 1
        self.column = 1
        self.diagnostics_count = 0

    def skip(self, length: int) -> None:
        """Advance over ``length`` characters without checking them."""
        self._advance(length)

    def valid_word(self, length: int) -> bool:
        """Return whether the next ``length`` characters form a known word.

        This is a lookahead: the cursor does not move.
        """
        return self.dictionary.check(self.text[self.cursor : self.cursor + length])

    def check(self, length: int) -> None:
        """Advance over ``length`` characters and report them if the dictionary suggests replacements."""
        line_start, column_start = self.line, self.column
        start, byte_start = self.cursor, self.byte_offset
        self._advance(length)

        word = self.text[start : self.cursor]
        suggestions = self.dictionary.suggest(word)
        if not suggestions:
            return

        diagnostic = Diagnostic(
            path=self.path,
            word=word,
            line_start=line_start,
            column_start=column_start,
            line_end=self.line,
            column_end=self.column,
            start=start,
            end=self.cursor,
            byte_start=byte_start,
            byte_end=self.byte_offset,
            suggestions=tuple(suggestions),
        )
        logger.debug(f"Unknown word '{word}' at {self.path}:{line_start}:{column_start}")
        self.diagnostics_count += 1
        self.on_diagnostic(diagnostic)

    def _advance(self, length: int) -> None:
        end = self.cursor + length
        if length < 0 or end > len(self.text):
            msg = f"Cannot advance {length} characters from offset {self.cursor} of {len(self.text)}"
            logger.error(msg)
            raise ValueError(msg)

        segment = self.text[self.cursor : end]
        for char in segment:
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.cursor = end
        self.byte_offset += len(segment.encode("utf-8"))
