"""Classify a syntax tree into checked word spans and skipped spans.

The walker descends the tree in source order carrying a mode that says
whether text is prose (``Mode.MARKDOWN``) or code (``Mode.CODE``). Prose
text is split into words, which are checked, and the whitespace and
punctuation between them, which is skipped. Everything else (markup
syntax, math, references, code) is skipped. The resulting stream of
``skip``/``check`` calls covers the document exactly once.
"""

import string
from collections.abc import Callable
from enum import Enum, auto

from typst_spell.checker import Checker, Diagnostic
from typst_spell.dictionary import Dictionary
from typst_spell.syntax import SyntaxKind, SyntaxNode, parse


class Mode(Enum):
    """How text below the current node is interpreted."""

    MARKDOWN = auto()
    CODE = auto()


class _Scan(Enum):
    START = auto()
    BREAK = auto()
    WORD = auto()


# ASCII whitespace (without vertical tab) and ASCII punctuation separate words
BREAK_CHARACTERS = frozenset(" \t\n\r\x0c" + string.punctuation)

CODE_KINDS = frozenset(
    {
        SyntaxKind.FUNC_CALL,
        SyntaxKind.CODE,
        SyntaxKind.MODULE_IMPORT,
        SyntaxKind.MODULE_INCLUDE,
        SyntaxKind.LET_BINDING,
        SyntaxKind.SHOW_RULE,
        SyntaxKind.SET_RULE,
    }
)
IGNORED_KINDS = frozenset({SyntaxKind.EQUATION, SyntaxKind.REF})
BRACKETS = frozenset({SyntaxKind.LEFT_BRACKET, SyntaxKind.RIGHT_BRACKET})


def check(root: SyntaxNode, checker: Checker) -> None:
    """Walk ``root`` as prose and feed every span to ``checker``.

    Args:
        root: Root of the document's syntax tree
        checker: Checker positioned at the start of the same document
    """
    _convert(root, Mode.MARKDOWN, checker)


def check_text(
    text: str,
    dictionary: Dictionary,
    path: str = "<string>",
    on_diagnostic: Callable[[Diagnostic], None] | None = None,
) -> list[Diagnostic]:
    """Parse and check ``text`` in one pass.

    Args:
        text: Typst source
        dictionary: Dictionary to check words against
        path: Identifier reported in the diagnostics
        on_diagnostic: Optional sink also called for each diagnostic as it
            is found

    Returns:
        All diagnostics of the pass, in document order

    Example:
        >>> dictionary = Dictionary.from_words(["the", "cat", "sat"])
        >>> [d.word for d in check_text("Teh cat sat.", dictionary)]
        ['Teh']
    """
    diagnostics: list[Diagnostic] = []

    def collect(diagnostic: Diagnostic) -> None:
        diagnostics.append(diagnostic)
        if on_diagnostic is not None:
            on_diagnostic(diagnostic)

    checker = Checker(dictionary, text, path, collect)
    check(parse(text), checker)
    return diagnostics


def _convert(node: SyntaxNode, mode: Mode, checker: Checker) -> None:
    kind = node.kind

    if kind is SyntaxKind.TEXT and mode is Mode.MARKDOWN:
        _check_words(node.text, checker)
    elif kind in IGNORED_KINDS:
        _skip_all(node, checker)
    elif kind in CODE_KINDS:
        _convert_children(node, Mode.CODE, checker)
    elif kind is SyntaxKind.HEADING:
        _convert_children(node, mode, checker)
    elif kind in BRACKETS:
        checker.skip(len(node.text))
    elif kind is SyntaxKind.MARKUP:
        _convert_children(node, Mode.MARKDOWN, checker)
    elif kind is SyntaxKind.SHORTHAND and node.text == "~":
        checker.skip(len(node.text))
    elif kind is SyntaxKind.SPACE and mode is Mode.MARKDOWN:
        checker.skip(len(node.text))
    elif kind is SyntaxKind.PARBREAK:
        checker.skip(len(node.text))
    elif kind is SyntaxKind.SMART_QUOTE and mode is Mode.MARKDOWN:
        checker.check(len(node.text))
    else:
        # Any other node, including code-mode text, spaces and quotes
        if node.text:
            checker.skip(len(node.text))
        _convert_children(node, mode, checker)


def _convert_children(node: SyntaxNode, mode: Mode, checker: Checker) -> None:
    for child in node.children:
        _convert(child, mode, checker)


def _skip_all(node: SyntaxNode, checker: Checker) -> None:
    if node.text:
        checker.skip(len(node.text))
    for child in node.children:
        _skip_all(child, checker)


def _check_words(text: str, checker: Checker) -> None:
    """Split prose into maximal word and break runs.

    A period directly after a word stays part of it when word and period
    together are a dictionary entry ("Dr.", "etc."), except inside a run
    of periods.
    """
    start = 0
    state = _Scan.START

    for index, char in enumerate(text):
        is_break = char in BREAK_CHARACTERS
        if state is _Scan.START:
            state = _Scan.BREAK if is_break else _Scan.WORD
        elif state is _Scan.WORD and is_break:
            if char == "." and _is_abbreviation(text, start, index, checker):
                continue
            checker.check(index - start)
            start = index
            state = _Scan.BREAK
        elif state is _Scan.BREAK and not is_break:
            checker.skip(index - start)
            start = index
            state = _Scan.WORD

    if state is _Scan.WORD:
        checker.check(len(text) - start)
    elif state is _Scan.BREAK:
        checker.skip(len(text) - start)


def _is_abbreviation(text: str, start: int, index: int, checker: Checker) -> bool:
    if text[index + 1 : index + 2] == ".":
        return False
    return checker.valid_word(index - start + 1)
