"""Shared test doubles for the checker and the walker."""

import string

from typst_spell.checker import Checker

DEFAULT_SUGGESTIONS = ("word",)


class FakeDictionary:
    """In-memory dictionary with fixed words and suggestions.

    Lookups are case-insensitive. Single punctuation characters are valid,
    like in the real dictionary. Unknown words without configured
    suggestions get ``DEFAULT_SUGGESTIONS``.
    """

    def __init__(self, words=(), suggestions=None):
        self.words = {word.lower() for word in words}
        self.suggestions = suggestions or {}
        self.queries = []

    def check(self, word):
        self.queries.append(word)
        return word.lower() in self.words or (len(word) == 1 and word in string.punctuation)

    def suggest(self, word):
        if self.check(word):
            return []
        return list(self.suggestions.get(word, DEFAULT_SUGGESTIONS))


class RecordingChecker(Checker):
    """Checker that records every span it is given as (kind, start, length)."""

    def __init__(self, dictionary, text, path="doc.typ"):
        self.diagnostics = []
        super().__init__(dictionary, text, path, self.diagnostics.append)
        self.spans = []

    def skip(self, length):
        self.spans.append(("skip", self.cursor, length))
        super().skip(length)

    def check(self, length):
        self.spans.append(("check", self.cursor, length))
        super().check(length)

    def checked_words(self):
        return [self.text[start : start + length] for kind, start, length in self.spans if kind == "check"]
