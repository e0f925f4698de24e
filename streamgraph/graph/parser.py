"""Recursive-descent parser for graph expressions.

Grammar:

    graph     := sequence
    sequence  := element (":" element)*
    element   := leaf | parallel
    parallel  := "<" sequence ("," sequence)* ">"
    leaf      := name ["(" args ")"]

The parser works on (start, end) spans into the original expression and only
materializes leaf tokens. Text between parentheses is opaque, so argument
text may hold separators. A leaf written directly against a group, as in
`a<b,c>` or `<b,c>d`, is chained to it as if a `:` stood between them.

Example:
    >>> from streamgraph.graph import parse
    >>> spec = parse("slice:<sum,scale(gain)>")
    >>> spec.kind.value, [node.kind.value for node in spec.children]
    ('sequence', ['leaf', 'parallel'])
    >>> spec.to_expression()
    'slice:<sum,scale(gain)>'
"""

import logging
import re

from .errors import ParseError
from .spec import GraphSpec


logger = logging.getLogger(__name__)

LEAF_PATTERN = re.compile(r"([A-Za-z0-9_.\-]+)(?:\((.*)\))?", re.DOTALL)


def parse(expression: str) -> GraphSpec:
    """Parse a graph expression into a `GraphSpec` tree.

    Args:
        expression: Graph expression such as "slice:fft:<sum,moments>".

    Returns:
        The root node: a leaf, a sequence or a parallel.

    Raises:
        ParseError: If brackets are unbalanced (UNBALANCED_BRACKETS), a
            stage name is missing (EMPTY_LEAF), or the syntax is otherwise
            malformed (ILLEGAL_SYNTAX).

    Examples:
        >>> parse("<sum,moments,_>").kind.value
        'parallel'
    """
    if not isinstance(expression, str):
        raise ParseError(
            message=f"graph expression must be a string, got {type(expression).__name__}",
            code="ILLEGAL_SYNTAX",
            details={"type": type(expression).__name__},
        )

    spec = _Parser(expression).parse()
    logger.debug("parsed graph=%s kind=%s", spec.to_expression(), spec.kind.value)
    return spec


class _Parser:
    """Parse state over one expression string."""

    def __init__(self, text: str) -> None:
        self.text = text

    def parse(self) -> GraphSpec:
        self._check_brackets()
        return self._parse_node(0, len(self.text), wrapped=False)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _error(self, message: str, code: str, start: int, end: int) -> ParseError:
        return ParseError(
            message=message,
            code=code,
            details={
                "expression": self.text,
                "start": start,
                "end": end,
                "token": self.text[start:end],
            },
        )

    # ------------------------------------------------------------------
    # Scanning helpers
    # ------------------------------------------------------------------

    def _check_brackets(self) -> None:
        opened = self.text.count("<")
        closed = self.text.count(">")
        if opened != closed:
            raise self._error(
                f"unbalanced brackets: {opened} '<' for {closed} '>'",
                "UNBALANCED_BRACKETS",
                0,
                len(self.text),
            )

        depth = 0
        i = 0
        while i < len(self.text):
            char = self.text[i]
            if char == "(":
                i = self._closing_paren(i, len(self.text))
            elif char == "<":
                depth += 1
            elif char == ">":
                depth -= 1
                if depth < 0:
                    raise self._error(
                        f"'>' at position {i} closes no group",
                        "UNBALANCED_BRACKETS",
                        i,
                        i + 1,
                    )
            i += 1

    def _closing_paren(self, start: int, end: int) -> int:
        depth = 0
        for i in range(start, end):
            if self.text[i] == "(":
                depth += 1
            elif self.text[i] == ")":
                depth -= 1
                if depth == 0:
                    return i
        raise self._error(
            f"unclosed '(' at position {start}",
            "ILLEGAL_SYNTAX",
            start,
            end,
        )

    def _closing_bracket(self, start: int, end: int) -> int:
        depth = 0
        i = start
        while i < end:
            char = self.text[i]
            if char == "(":
                i = self._closing_paren(i, end)
            elif char == "<":
                depth += 1
            elif char == ">":
                depth -= 1
                if depth == 0:
                    return i
            i += 1
        raise self._error(
            f"unclosed '<' at position {start}",
            "UNBALANCED_BRACKETS",
            start,
            end,
        )

    def _trim(self, start: int, end: int) -> tuple[int, int]:
        while start < end and self.text[start].isspace():
            start += 1
        while end > start and self.text[end - 1].isspace():
            end -= 1
        return start, end

    def _is_blank(self, start: int, end: int) -> bool:
        trimmed_start, trimmed_end = self._trim(start, end)
        return trimmed_start == trimmed_end

    def _top_level(self, start: int, end: int) -> tuple[list[int], bool, bool]:
        """Return depth-0 comma positions and whether colons or groups occur."""
        commas: list[int] = []
        has_colon = False
        has_group = False
        depth = 0
        i = start
        while i < end:
            char = self.text[i]
            if char == "(":
                i = self._closing_paren(i, end)
            elif char == "<":
                if depth == 0:
                    has_group = True
                depth += 1
            elif char == ">":
                depth -= 1
            elif depth == 0 and char == ",":
                commas.append(i)
            elif depth == 0 and char == ":":
                has_colon = True
            i += 1
        return commas, has_colon, has_group

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _parse_node(self, start: int, end: int, wrapped: bool) -> GraphSpec:
        start, end = self._trim(start, end)

        while start < end and self.text[start] == "<" and self._closing_bracket(start, end) == end - 1:
            start, end = self._trim(start + 1, end - 1)
            wrapped = True

        if start == end:
            raise self._error(
                f"empty stage name at position {start}",
                "EMPTY_LEAF",
                start,
                end,
            )

        commas, has_colon, has_group = self._top_level(start, end)

        if commas:
            if not wrapped:
                raise self._error(
                    f"',' at position {commas[0]} outside of a '<...>' group",
                    "ILLEGAL_SYNTAX",
                    start,
                    end,
                )
            bounds = [start, *[pos + 1 for pos in commas]]
            ends = [*commas, end]
            branches = [self._parse_node(s, e, wrapped=False) for s, e in zip(bounds, ends)]
            return GraphSpec.parallel(*branches)

        if has_colon or has_group:
            elements = [self._parse_node(s, e, wrapped=False) for s, e in self._split_sequence(start, end)]
            return GraphSpec.sequence(*elements)

        return self._parse_leaf(start, end)

    def _split_sequence(self, start: int, end: int) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        element_start = start
        expect_element = True
        i = start

        while i < end:
            char = self.text[i]

            if char == "(":
                i = self._closing_paren(i, end) + 1
                expect_element = True
                continue

            if char == ":":
                spans.append((element_start, i))
                element_start = i + 1
                expect_element = True
                i += 1
                continue

            if char == "<":
                if not self._is_blank(element_start, i):
                    spans.append((element_start, i))
                close = self._closing_bracket(i, end)
                spans.append((i, close + 1))

                i, _ = self._trim(close + 1, end)
                if i < end and self.text[i] == ":":
                    i += 1
                    expect_element = True
                else:
                    expect_element = False
                element_start = i
                continue

            if not char.isspace():
                expect_element = True
            i += 1

        if expect_element or not self._is_blank(element_start, end):
            spans.append((element_start, end))

        return spans

    def _parse_leaf(self, start: int, end: int) -> GraphSpec:
        token = self.text[start:end]
        match = LEAF_PATTERN.fullmatch(token)

        if match is None:
            if token.startswith("("):
                raise self._error(
                    f"missing stage name before '{token}'",
                    "ILLEGAL_SYNTAX",
                    start,
                    end,
                )
            raise self._error(
                f"illegal stage token '{token}'",
                "ILLEGAL_SYNTAX",
                start,
                end,
            )

        if match.group(2) is not None:
            open_at = start + match.start(2) - 1
            close_at = self._closing_paren(open_at, end)
            if close_at != end - 1:
                raise self._error(
                    f"unexpected '{self.text[close_at + 1:end]}' after arguments of '{match.group(1)}'",
                    "ILLEGAL_SYNTAX",
                    close_at + 1,
                    end,
                )

        return GraphSpec.leaf(match.group(1), match.group(2))
