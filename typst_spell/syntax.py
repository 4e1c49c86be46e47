"""Lossless parser for Typst markup.

This module turns Typst source text into an immutable syntax tree. The tree
is concrete: leaves carry the exact source text and inner nodes carry none,
so concatenating the leaves in pre-order reproduces the input exactly.

The parser only distinguishes what the spell checker needs (prose, markup
syntax, math, references and embedded code) and never fails. Unterminated
constructs simply extend to the end of their enclosing node.

Example:
    >>> root = parse("= Intro\\nSee #link(\\"x\\")[here].")
    >>> root.kind
    <SyntaxKind.MARKUP: 'markup'>
    >>> root.full_text() == "= Intro\\nSee #link(\\"x\\")[here]."
    True
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class SyntaxKind(Enum):
    """Syntactic category of a syntax tree node."""

    # Markup
    MARKUP = "markup"
    TEXT = "text"
    SPACE = "space"
    PARBREAK = "parbreak"
    LINEBREAK = "linebreak"
    ESCAPE = "escape"
    SHORTHAND = "shorthand"
    SMART_QUOTE = "smart quote"
    STRONG = "strong"
    EMPH = "emph"
    STAR = "star"
    UNDERSCORE = "underscore"
    RAW = "raw"
    LINK = "link"
    LABEL = "label"
    REF = "ref"
    REF_MARKER = "ref marker"
    HEADING = "heading"
    HEADING_MARKER = "heading marker"
    LIST_ITEM = "list item"
    LIST_MARKER = "list marker"
    ENUM_ITEM = "enum item"
    ENUM_MARKER = "enum marker"
    TERM_ITEM = "term item"
    TERM_MARKER = "term marker"
    LINE_COMMENT = "line comment"
    BLOCK_COMMENT = "block comment"

    # Math
    EQUATION = "equation"
    DOLLAR = "dollar"
    MATH = "math"

    # Code
    HASH = "hash"
    CODE = "code"
    CODE_BLOCK = "code block"
    CONTENT_BLOCK = "content block"
    PARENTHESIZED = "parenthesized"
    FUNC_CALL = "function call"
    FIELD_ACCESS = "field access"
    ARGS = "arguments"
    IDENT = "identifier"
    KEYWORD = "keyword"
    STR = "string"
    NUMERIC = "numeric"
    LEFT_PAREN = "left paren"
    RIGHT_PAREN = "right paren"
    LEFT_BRACE = "left brace"
    RIGHT_BRACE = "right brace"
    LEFT_BRACKET = "left bracket"
    RIGHT_BRACKET = "right bracket"
    COMMA = "comma"
    COLON = "colon"
    SEMICOLON = "semicolon"
    DOT = "dot"
    OPERATOR = "operator"
    LET_BINDING = "let binding"
    SET_RULE = "set rule"
    SHOW_RULE = "show rule"
    MODULE_IMPORT = "module import"
    MODULE_INCLUDE = "module include"
    CONDITIONAL = "conditional"
    FOR_LOOP = "for loop"
    WHILE_LOOP = "while loop"
    CONTEXTUAL = "contextual"

    ERROR = "error"


@dataclass(frozen=True)
class SyntaxNode:
    """One node of the syntax tree.

    Attributes:
        kind: Syntactic category of the node
        text: Source text of a leaf, empty for inner nodes
        children: Child nodes in source order, empty for leaves
    """

    kind: SyntaxKind
    text: str = ""
    children: tuple["SyntaxNode", ...] = ()

    def full_text(self) -> str:
        """Return the source text covered by this node and its descendants."""
        return self.text + "".join(child.full_text() for child in self.children)

    def leaves(self) -> Iterator["SyntaxNode"]:
        """Yield the leaves below this node in source order."""
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.leaves()


WHITESPACE = " \t\r\n"
MARKUP_SPECIAL = frozenset(WHITESPACE + "\\*`$#@<'\"~[]")
SHORTHANDS = ("---", "--", "...", "-?", "~")

IDENT_RE = re.compile(r"[^\W\d]\w*(?:-\w+)*")
NUMERIC_RE = re.compile(r"\d+(?:\.\d+)?(?:e[+-]?\d+)?(?:%|[a-z]+)?")
LABEL_RE = re.compile(r"<[\w\-.:]+>")
REF_RE = re.compile(r"@\w+(?:[\-.:]\w+)*")
LINK_RE = re.compile(r"https?://[^\s<>\[\]()\"'`]*[^\s<>\[\]()\"'`.,;:!?]")
OPERATOR_RE = re.compile(r"=>|==|!=|<=|>=|\+=|-=|\*=|/=|\.\.|[-+*/=<>!]")
MATH_TOKEN_RE = re.compile(r"\s+|\S+")

HEADING_MARKER_RE = re.compile(r"=+(?=[ \t])")
LIST_MARKER_RE = re.compile(r"-(?=[ \t])")
ENUM_MARKER_RE = re.compile(r"(?:\+|\d+\.)(?=[ \t])")
TERM_MARKER_RE = re.compile(r"/(?=[ \t])")

STATEMENTS = {
    "let": SyntaxKind.LET_BINDING,
    "set": SyntaxKind.SET_RULE,
    "show": SyntaxKind.SHOW_RULE,
    "import": SyntaxKind.MODULE_IMPORT,
    "include": SyntaxKind.MODULE_INCLUDE,
    "if": SyntaxKind.CONDITIONAL,
    "for": SyntaxKind.FOR_LOOP,
    "while": SyntaxKind.WHILE_LOOP,
    "context": SyntaxKind.CONTEXTUAL,
}
KEYWORDS = frozenset(
    {"none", "auto", "true", "false", "in", "not", "and", "or", "as", "else", "return", "break", "continue"}
)
BLOCKS = frozenset({SyntaxKind.CODE_BLOCK, SyntaxKind.CONTENT_BLOCK})
SINGLE_CHAR_TOKENS = {
    ",": SyntaxKind.COMMA,
    ":": SyntaxKind.COLON,
    ";": SyntaxKind.SEMICOLON,
    ".": SyntaxKind.DOT,
    "#": SyntaxKind.HASH,
}


def parse(text: str) -> SyntaxNode:
    """Parse Typst source text into a syntax tree rooted at a MARKUP node.

    Args:
        text: Complete document source

    Returns:
        Root node whose full text equals ``text``
    """
    parser = _Parser(text)
    return parser.markup(frozenset(), block=True)


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def eat(self, kind: SyntaxKind, length: int) -> SyntaxNode:
        node = SyntaxNode(kind, self.text[self.pos : self.pos + length])
        self.pos += length
        return node

    def eat_to(self, kind: SyntaxKind, end: int) -> SyntaxNode:
        return self.eat(kind, end - self.pos)

    # Markup

    def markup(
        self,
        stops: frozenset[str],
        *,
        block: bool,
        line_only: bool = False,
        paragraph: bool = False,
    ) -> SyntaxNode:
        """Parse markup until a stop character, a newline or a paragraph break.

        Args:
            stops: Characters that end this markup when seen unnested
            block: Whether the start of this markup counts as a line start
            line_only: Stop before the next newline (heading and item bodies)
            paragraph: Stop before the next paragraph break (strong, emph)
        """
        start = self.pos
        children: list[SyntaxNode] = []
        depth = 0
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if line_only and char == "\n":
                break
            if paragraph and self._at_parbreak():
                break
            if char == "[":
                depth += 1
                children.append(self.eat(SyntaxKind.TEXT, 1))
                continue
            if char == "]" and depth:
                depth -= 1
                children.append(self.eat(SyntaxKind.TEXT, 1))
                continue
            if char in stops and (char != "_" or self._is_emph_delimiter(self.pos)):
                break
            if char == "]":
                children.append(self.eat(SyntaxKind.TEXT, 1))
                continue
            children.extend(self.markup_nodes(stops, start, block, line_only))
        return SyntaxNode(SyntaxKind.MARKUP, children=tuple(children))

    def markup_nodes(
        self, stops: frozenset[str], start: int, block: bool, line_only: bool
    ) -> list[SyntaxNode]:
        text, pos = self.text, self.pos
        char = text[pos]

        if char in WHITESPACE:
            return [self.whitespace(line_only)]
        if text.startswith("//", pos):
            return [self.line_comment()]
        if text.startswith("/*", pos):
            return [self.block_comment()]
        if char == "\\":
            return [self.escape()]
        if self._at_line_start(start, block):
            item = self.line_item(stops)
            if item is not None:
                return [item]
        if char == "*":
            return [self.delimited(SyntaxKind.STRONG, SyntaxKind.STAR, "*", stops, line_only)]
        if char == "_" and self._is_emph_delimiter(pos):
            return [self.delimited(SyntaxKind.EMPH, SyntaxKind.UNDERSCORE, "_", stops, line_only)]
        if char == "`":
            return [self.raw()]
        if char == "$":
            return [self.equation()]
        if char == "#" and self._starts_code(pos + 1):
            return [self.eat(SyntaxKind.HASH, 1), self.embedded_expr()]
        if char == "@" and (match := REF_RE.match(text, pos)):
            return [self.ref(match.end())]
        if char == "<" and (match := LABEL_RE.match(text, pos)):
            return [self.eat_to(SyntaxKind.LABEL, match.end())]
        if char in "'\"":
            return [self.eat(SyntaxKind.SMART_QUOTE, 1)]
        for shorthand in SHORTHANDS:
            if text.startswith(shorthand, pos):
                return [self.eat(SyntaxKind.SHORTHAND, len(shorthand))]
        if (match := LINK_RE.match(text, pos)) and not (pos and text[pos - 1].isalnum()):
            return [self.eat_to(SyntaxKind.LINK, match.end())]
        return [self.text_run(stops)]

    def text_run(self, stops: frozenset[str]) -> SyntaxNode:
        end = self.pos + 1
        while end < len(self.text) and not self._is_special(end, stops):
            end += 1
        return self.eat_to(SyntaxKind.TEXT, end)

    def whitespace(self, line_only: bool) -> SyntaxNode:
        end = self.pos
        while end < len(self.text) and self.text[end] in WHITESPACE:
            if line_only and self.text[end] == "\n":
                break
            end += 1
        segment = self.text[self.pos : end]
        kind = SyntaxKind.PARBREAK if segment.count("\n") >= 2 else SyntaxKind.SPACE
        return self.eat_to(kind, end)

    def line_comment(self) -> SyntaxNode:
        end = self.text.find("\n", self.pos)
        return self.eat_to(SyntaxKind.LINE_COMMENT, len(self.text) if end < 0 else end)

    def block_comment(self) -> SyntaxNode:
        end = self.text.find("*/", self.pos + 2)
        return self.eat_to(SyntaxKind.BLOCK_COMMENT, len(self.text) if end < 0 else end + 2)

    def escape(self) -> SyntaxNode:
        following = self.peek(1)
        if not following or following in WHITESPACE:
            return self.eat(SyntaxKind.LINEBREAK, 1)
        if self.text.startswith("u{", self.pos + 1):
            end = self.text.find("}", self.pos + 3)
            if end >= 0:
                return self.eat_to(SyntaxKind.ESCAPE, end + 1)
        return self.eat(SyntaxKind.ESCAPE, 2)

    def line_item(self, stops: frozenset[str]) -> SyntaxNode | None:
        """Parse a heading or list, enum or term item starting at a line start."""
        markers = (
            (HEADING_MARKER_RE, SyntaxKind.HEADING, SyntaxKind.HEADING_MARKER),
            (LIST_MARKER_RE, SyntaxKind.LIST_ITEM, SyntaxKind.LIST_MARKER),
            (ENUM_MARKER_RE, SyntaxKind.ENUM_ITEM, SyntaxKind.ENUM_MARKER),
            (TERM_MARKER_RE, SyntaxKind.TERM_ITEM, SyntaxKind.TERM_MARKER),
        )
        for pattern, kind, marker_kind in markers:
            match = pattern.match(self.text, self.pos)
            if match is None:
                continue
            children = [self.eat_to(marker_kind, match.end()), self.inline_space()]
            if kind is SyntaxKind.TERM_ITEM:
                children.append(self.markup(stops | {":"}, block=False, line_only=True))
                if self.peek() != ":":
                    return SyntaxNode(kind, children=tuple(children))
                children.append(self.eat(SyntaxKind.COLON, 1))
            children.append(self.markup(stops, block=False, line_only=True))
            return SyntaxNode(kind, children=tuple(children))
        return None

    def delimited(
        self,
        kind: SyntaxKind,
        delimiter_kind: SyntaxKind,
        delimiter: str,
        stops: frozenset[str],
        line_only: bool,
    ) -> SyntaxNode:
        children = [self.eat(delimiter_kind, 1)]
        children.append(
            self.markup(stops | {delimiter}, block=False, line_only=line_only, paragraph=True)
        )
        if self.peek() == delimiter:
            children.append(self.eat(delimiter_kind, 1))
        return SyntaxNode(kind, children=tuple(children))

    def raw(self) -> SyntaxNode:
        count = 0
        while self.peek(count) == "`":
            count += 1
        if count == 2:
            return self.eat(SyntaxKind.RAW, 2)
        close = self.text.find("`" * count, self.pos + count)
        end = len(self.text) if close < 0 else close + count
        return self.eat_to(SyntaxKind.RAW, end)

    def equation(self) -> SyntaxNode:
        children = [self.eat(SyntaxKind.DOLLAR, 1)]
        end = self.pos
        while end < len(self.text) and self.text[end] != "$":
            end += 2 if self.text[end] == "\\" else 1
        end = min(end, len(self.text))
        tokens = []
        for match in MATH_TOKEN_RE.finditer(self.text, self.pos, end):
            kind = SyntaxKind.SPACE if match.group().isspace() else SyntaxKind.TEXT
            tokens.append(self.eat_to(kind, match.end()))
        children.append(SyntaxNode(SyntaxKind.MATH, children=tuple(tokens)))
        if self.peek() == "$":
            children.append(self.eat(SyntaxKind.DOLLAR, 1))
        return SyntaxNode(SyntaxKind.EQUATION, children=tuple(children))

    def ref(self, end: int) -> SyntaxNode:
        children = [self.eat_to(SyntaxKind.REF_MARKER, end)]
        if self.peek() == "[":
            children.append(self.content_block())
        return SyntaxNode(SyntaxKind.REF, children=tuple(children))

    def _at_line_start(self, start: int, block: bool) -> bool:
        index = self.pos - 1
        while index >= start and self.text[index] in " \t":
            index -= 1
        if index < start:
            return block
        return self.text[index] == "\n"

    def _at_parbreak(self) -> bool:
        end = self.pos
        newlines = 0
        while end < len(self.text) and self.text[end] in WHITESPACE:
            newlines += self.text[end] == "\n"
            end += 1
        return newlines >= 2

    def _is_emph_delimiter(self, index: int) -> bool:
        before = self.text[index - 1] if index else ""
        after = self.text[index + 1] if index + 1 < len(self.text) else ""
        return not (before.isalnum() and after.isalnum())

    def _is_special(self, index: int, stops: frozenset[str]) -> bool:
        char = self.text[index]
        if char == "_":
            return self._is_emph_delimiter(index)
        if char in MARKUP_SPECIAL or char in stops:
            return True
        if char == "/":
            return self.text.startswith(("//", "/*"), index)
        if char == "-":
            return self.text.startswith(("--", "-?"), index)
        if char == ".":
            return self.text.startswith("...", index)
        if char == "h":
            return LINK_RE.match(self.text, index) is not None and not self.text[index - 1].isalnum()
        return False

    def _starts_code(self, index: int) -> bool:
        if index >= len(self.text):
            return False
        return self.text[index] in "{[(\"" or IDENT_RE.match(self.text, index) is not None

    # Code

    def embedded_expr(self) -> SyntaxNode:
        """Parse the single expression following a ``#`` in markup."""
        char = self.peek()
        if char == "{":
            return self.code_block()
        if char == "[":
            return self.content_block()
        if char == "(":
            return self.parenthesized()
        if char == '"':
            return self.string()
        name = IDENT_RE.match(self.text, self.pos).group()
        if name in STATEMENTS:
            return self.statement(name)
        if name in KEYWORDS:
            return self.eat(SyntaxKind.KEYWORD, len(name))
        return self.postfix(self.eat(SyntaxKind.IDENT, len(name)))

    def postfix(self, expr: SyntaxNode) -> SyntaxNode:
        while True:
            char = self.peek()
            if char in ("(", "["):
                expr = SyntaxNode(SyntaxKind.FUNC_CALL, children=(expr, self.args()))
            elif char == "." and IDENT_RE.match(self.text, self.pos + 1):
                dot = self.eat(SyntaxKind.DOT, 1)
                field = self.eat_to(SyntaxKind.IDENT, IDENT_RE.match(self.text, self.pos).end())
                expr = SyntaxNode(SyntaxKind.FIELD_ACCESS, children=(expr, dot, field))
            else:
                return expr

    def args(self) -> SyntaxNode:
        children: list[SyntaxNode] = []
        if self.peek() == "(":
            children.extend(self.code_until(SyntaxKind.LEFT_PAREN, ")", SyntaxKind.RIGHT_PAREN))
        while self.peek() == "[":
            children.append(self.content_block())
        return SyntaxNode(SyntaxKind.ARGS, children=tuple(children))

    def code_until(
        self, open_kind: SyntaxKind, closer: str, close_kind: SyntaxKind
    ) -> list[SyntaxNode]:
        children = [self.eat(open_kind, 1)]
        while self.pos < len(self.text) and self.peek() != closer:
            children.append(self.code_node())
        if self.peek() == closer:
            children.append(self.eat(close_kind, 1))
        return children

    def parenthesized(self) -> SyntaxNode:
        children = self.code_until(SyntaxKind.LEFT_PAREN, ")", SyntaxKind.RIGHT_PAREN)
        return SyntaxNode(SyntaxKind.PARENTHESIZED, children=tuple(children))

    def code_block(self) -> SyntaxNode:
        opening = self.eat(SyntaxKind.LEFT_BRACE, 1)
        body: list[SyntaxNode] = []
        while self.pos < len(self.text) and self.peek() != "}":
            body.append(self.code_node())
        children = [opening, SyntaxNode(SyntaxKind.CODE, children=tuple(body))]
        if self.peek() == "}":
            children.append(self.eat(SyntaxKind.RIGHT_BRACE, 1))
        return SyntaxNode(SyntaxKind.CODE_BLOCK, children=tuple(children))

    def content_block(self) -> SyntaxNode:
        children = [self.eat(SyntaxKind.LEFT_BRACKET, 1)]
        children.append(self.markup(frozenset("]"), block=True))
        if self.peek() == "]":
            children.append(self.eat(SyntaxKind.RIGHT_BRACKET, 1))
        return SyntaxNode(SyntaxKind.CONTENT_BLOCK, children=tuple(children))

    def string(self) -> SyntaxNode:
        end = self.pos + 1
        while end < len(self.text) and self.text[end] != '"':
            end += 2 if self.text[end] == "\\" else 1
        return self.eat_to(SyntaxKind.STR, min(end + 1, len(self.text)))

    def inline_space(self) -> SyntaxNode:
        end = self.pos
        while end < len(self.text) and self.text[end] in " \t\r":
            end += 1
        return self.eat_to(SyntaxKind.SPACE, end)

    def code_node(self) -> SyntaxNode:
        """Parse one code token or nested block.

        Unmatched closing delimiters become ERROR leaves so that parsing
        always makes progress.
        """
        text, pos = self.text, self.pos
        char = text[pos]

        if char in WHITESPACE:
            end = pos
            while end < len(text) and text[end] in WHITESPACE:
                end += 1
            return self.eat_to(SyntaxKind.SPACE, end)
        if text.startswith("//", pos):
            return self.line_comment()
        if text.startswith("/*", pos):
            return self.block_comment()
        if char == '"':
            return self.string()
        if char in "0123456789":
            return self.eat_to(SyntaxKind.NUMERIC, NUMERIC_RE.match(text, pos).end())
        if match := IDENT_RE.match(text, pos):
            name = match.group()
            if name in STATEMENTS:
                return self.statement(name)
            if name in KEYWORDS:
                return self.eat(SyntaxKind.KEYWORD, len(name))
            return self.postfix(self.eat(SyntaxKind.IDENT, len(name)))
        if char == "(":
            return self.parenthesized()
        if char == "[":
            return self.content_block()
        if char == "{":
            return self.code_block()
        if char == "$":
            return self.equation()
        if char == "`":
            return self.raw()
        if char == "<" and (match := LABEL_RE.match(text, pos)):
            return self.eat_to(SyntaxKind.LABEL, match.end())
        if match := OPERATOR_RE.match(text, pos):
            return self.eat_to(SyntaxKind.OPERATOR, match.end())
        if char in SINGLE_CHAR_TOKENS:
            return self.eat(SINGLE_CHAR_TOKENS[char], 1)
        return self.eat(SyntaxKind.ERROR, 1)

    def statement(self, name: str) -> SyntaxNode:
        """Parse a keyword construct such as ``let``, ``show`` or ``if``.

        Bindings, rules and imports end at the end of the line or at a
        semicolon. Loops end after their body block, conditionals after
        their last ``else`` branch.
        """
        kind = STATEMENTS[name]
        children = [self.eat(SyntaxKind.KEYWORD, len(name))]
        if kind is SyntaxKind.CONTEXTUAL:
            children.append(self.inline_space())
            if self._starts_code(self.pos):
                children.append(self.embedded_expr())
            return SyntaxNode(kind, children=tuple(children))

        while self.pos < len(self.text):
            char = self.peek()
            if char == "\n" or char in ")]}":
                break
            if char in " \t\r":
                children.append(self.inline_space())
                continue
            if char == ";":
                children.append(self.eat(SyntaxKind.SEMICOLON, 1))
                break
            node = self.code_node()
            children.append(node)
            if kind in (SyntaxKind.CONDITIONAL, SyntaxKind.FOR_LOOP, SyntaxKind.WHILE_LOOP):
                if node.kind in BLOCKS and not (
                    kind is SyntaxKind.CONDITIONAL and self._else_follows()
                ):
                    break
        return SyntaxNode(kind, children=tuple(children))

    def _else_follows(self) -> bool:
        index = self.pos
        while index < len(self.text) and self.text[index] in " \t":
            index += 1
        match = IDENT_RE.match(self.text, index)
        return match is not None and match.group() == "else"
