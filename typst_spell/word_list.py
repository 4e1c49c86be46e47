"""Supplementary word lists.

A word list is a UTF-8 text file with one additional valid word per line,
for example project names or technical terms the dictionary does not know.
Blank lines and lines starting with ``#`` are ignored::

    # project vocabulary
    Typst
    cetz
    e.g.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger

COMMENT_PREFIX = "#"


def parse_words(lines: Iterable[str], source: str = "<words>") -> Iterator[str]:
    """Yield the entries of a word list in order.

    Raises:
        ValueError: If a line holds more than one word
    """
    for line_number, line in enumerate(lines, start=1):
        entry = line.strip()
        if not entry or entry.startswith(COMMENT_PREFIX):
            continue
        if any(char.isspace() for char in entry):
            msg = f"Invalid word format at line {line_number} of {source}: {entry!r} (one word per line)"
            logger.error(msg)
            raise ValueError(msg)
        yield entry


class WordListManager:
    """Reads word lists and remembers which words were already merged.

    The dictionary counts every merged occurrence of a word, so a list that
    is reloaded while watching must only contribute the words it gained.
    """

    def __init__(self):
        self._merged: set[str] = set()

    def load_from_file(self, file_path: str | Path) -> list[str]:
        """Read all words of a word list file, keeping their case.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If a line holds more than one word or the file is not UTF-8

        Example:
            >>> WordListManager().load_from_file("words.txt")
            ['Typst', 'cetz', 'e.g.']
        """
        path = Path(file_path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            msg = f"Word list file not found: {path}"
            logger.error(msg)
            raise FileNotFoundError(msg) from e
        except UnicodeDecodeError as e:
            msg = f"File encoding error in {path}: {e}"
            logger.error(msg)
            raise ValueError(msg) from e

        words = list(parse_words(text.splitlines(), source=str(path)))
        logger.info(f"Read {len(words)} word(s) from {path}")
        return words

    def remove_duplicates(self, words: list[str]) -> list[str]:
        """Drop repeated words, keeping the first occurrence of each."""
        unique_words = list(dict.fromkeys(words))
        removed = len(words) - len(unique_words)
        if removed:
            logger.info(f"Removed {removed} duplicate word(s)")
        return unique_words

    def unmerged(self, words: list[str]) -> list[str]:
        """Return the words not returned by an earlier call and remember them."""
        fresh = [word for word in self.remove_duplicates(words) if word not in self._merged]
        self._merged.update(fresh)
        return fresh
