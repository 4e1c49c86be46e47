"""Dictionary oracle backed by pyspellchecker.

This module answers the two questions the spell checker asks about a word:
is it valid, and if not, what could it be replaced with. Word frequency
lists for one or more languages are loaded once; supplementary words can be
merged in before (or between) check passes.
"""

from collections.abc import Iterable

from loguru import logger
from spellchecker import SpellChecker

LONG_WORD_LENGTH = 10


class Dictionary:
    """Spelling oracle for one or more languages.

    Lookups are case-insensitive and never modify the dictionary, so one
    instance can be shared by any number of check passes.

    Attributes:
        max_suggestions: Upper bound on the number of suggestions per word
    """

    def __init__(self, spell_checker: SpellChecker, max_suggestions: int = 5):
        """Wrap an already loaded ``SpellChecker``.

        Args:
            spell_checker: pyspellchecker instance holding the word frequencies
            max_suggestions: Upper bound on suggestions returned by ``suggest``

        Raises:
            ValueError: If max_suggestions is smaller than 1
        """
        if max_suggestions < 1:
            msg = "max_suggestions must be at least 1"
            logger.error(msg)
            raise ValueError(msg)

        self._spell = spell_checker
        self.max_suggestions = max_suggestions

    @classmethod
    def load(
        cls, languages: Iterable[str], distance: int = 2, max_suggestions: int = 5
    ) -> "Dictionary":
        """Load the bundled word frequency lists for ``languages``.

        Args:
            languages: Language codes such as "en" or "de"; the first one is
                the primary language, the rest are merged into it
            distance: Maximum edit distance considered for suggestions
            max_suggestions: Upper bound on suggestions per word

        Returns:
            A ready to use Dictionary

        Raises:
            ValueError: If no language is given or a language is not available

        Example:
            >>> dictionary = Dictionary.load(["en"])
            >>> dictionary.check("house")
            True
        """
        codes = [code.strip().lower() for code in languages if code and code.strip()]
        if not codes:
            msg = "No dictionary specified"
            logger.error(msg)
            raise ValueError(msg)

        logger.debug(f"Loading dictionaries: {', '.join(codes)}")
        try:
            spell_checker = SpellChecker(language=codes, distance=distance)
        except (ValueError, OSError) as e:
            msg = f"Failed to load dictionary for language(s) {', '.join(codes)}: {e}"
            logger.error(msg)
            raise ValueError(msg) from e

        logger.info(f"Loaded dictionaries: {', '.join(codes)}")
        return cls(spell_checker, max_suggestions=max_suggestions)

    @classmethod
    def from_words(
        cls, words: Iterable[str], distance: int = 2, max_suggestions: int = 5
    ) -> "Dictionary":
        """Build a dictionary that knows exactly ``words``."""
        dictionary = cls(SpellChecker(language=None, distance=distance), max_suggestions)
        dictionary.add_words(words)
        return dictionary

    def add_words(self, words: Iterable[str]) -> int:
        """Merge additional valid words into the dictionary.

        Args:
            words: Words to accept from now on

        Returns:
            Number of words added
        """
        new_words = [word for word in words if word]
        if new_words:
            self._spell.word_frequency.load_words(new_words)
        logger.debug(f"Added {len(new_words)} word(s) to the dictionary")
        return len(new_words)

    def check(self, word: str) -> bool:
        """Return whether ``word`` is valid.

        Numbers and single punctuation characters are always valid.
        """
        return not self._spell.unknown([word])

    def suggest(self, word: str) -> list[str]:
        """Return replacement candidates for ``word``.

        Args:
            word: The word to look up

        Returns:
            The candidates ordered by frequency (most common first, ties
            alphabetically), capitalised like ``word``. An empty list means
            the word is accepted: it is valid, or nothing similar is known.
        """
        if self.check(word):
            return []

        ranked = sorted(self._candidates(word), key=lambda c: (-self._spell.word_usage_frequency(c), c))
        ranked = ranked[: self.max_suggestions]
        if word[:1].isupper():
            ranked = [candidate[:1].upper() + candidate[1:] for candidate in ranked]
        return ranked

    def _candidates(self, word: str) -> set[str]:
        if len(word) > LONG_WORD_LENGTH:
            # Edit distance 2 grows quadratically with the word length
            return self._spell.known(self._spell.edit_distance_1(word))
        return self._spell.candidates(word) or set()
