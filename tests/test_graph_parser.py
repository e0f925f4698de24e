"""Tests for streamgraph.graph.parser module."""

import pytest

from streamgraph.graph import GraphKind, GraphSpec, ParseError, parse


def leaf_names(spec: GraphSpec) -> list[str]:
    return [node.name for node in spec.children]


class TestParseClassification:
    """Tests for leaf / sequence / parallel classification."""

    def test_single_leaf(self):
        """A bare name parses to a leaf."""
        spec = parse("thru")

        assert spec.kind is GraphKind.LEAF
        assert spec.name == "thru"
        assert spec.args is None

    def test_sequence_of_five_leaves(self):
        """Colon-separated names parse to a sequence in order."""
        spec = parse("slice:fft:sum:scale:onseg")

        assert spec.kind is GraphKind.SEQUENCE
        assert all(node.is_leaf for node in spec.children)
        assert leaf_names(spec) == ["slice", "fft", "sum", "scale", "onseg"]

    def test_parallel_of_three_leaves(self):
        """A bracketed comma list parses to a parallel of distinct branches."""
        spec = parse("<sum,moments,_>")

        assert spec.kind is GraphKind.PARALLEL
        assert leaf_names(spec) == ["sum", "moments", "_"]
        assert len(set(id(node) for node in spec.children)) == 3

    def test_sequence_with_parallel_element(self):
        """A group inside a sequence is one element even with inner colons."""
        spec = parse("slice:<fft:sum,moments>:scale")

        assert spec.kind is GraphKind.SEQUENCE
        assert [node.kind for node in spec.children] == [
            GraphKind.LEAF,
            GraphKind.PARALLEL,
            GraphKind.LEAF,
        ]

        branch = spec.children[1].children[0]
        assert branch.kind is GraphKind.SEQUENCE
        assert leaf_names(branch) == ["fft", "sum"]

    def test_parallel_followed_by_leaf(self):
        """A colon right after a closed group separates elements."""
        spec = parse("<thru,thru>:thru")

        assert spec.kind is GraphKind.SEQUENCE
        assert spec.children[0].kind is GraphKind.PARALLEL
        assert spec.children[1] == GraphSpec.leaf("thru")

    def test_nested_parallels(self):
        """Parallels nest inside parallel branches."""
        spec = parse("<a,<b,c>:d>")

        assert spec.kind is GraphKind.PARALLEL
        second = spec.children[1]
        assert second.kind is GraphKind.SEQUENCE
        assert second.children[0].kind is GraphKind.PARALLEL
        assert leaf_names(second.children[0]) == ["b", "c"]

    def test_outer_brackets_are_stripped(self):
        """Redundant outer brackets do not change the result."""
        assert parse("<<a:b>>") == parse("a:b")
        assert parse("<a>") == GraphSpec.leaf("a")

    def test_whitespace_is_ignored_around_tokens(self):
        """Spaces around separators are trimmed."""
        assert parse(" a : < b , c > ") == parse("a:<b,c>")


class TestParseLeaves:
    """Tests for leaf tokens and argument text."""

    def test_leaf_with_args(self):
        """Argument text in parentheses is kept on the leaf."""
        spec = parse("scale(gain)")

        assert spec.name == "scale"
        assert spec.args == "gain"
        assert spec.instance_name == "gain"

    def test_args_are_opaque_to_separators(self):
        """Commas and colons inside parentheses do not split."""
        spec = parse("a(x:y,z):b")

        assert spec.kind is GraphKind.SEQUENCE
        assert spec.children[0].args == "x:y,z"
        assert spec.children[1].name == "b"

    def test_nested_parentheses_in_args(self):
        """Balanced parentheses may appear inside the arguments."""
        spec = parse("a(f(x))")

        assert spec.name == "a"
        assert spec.args == "f(x)"

    def test_dotted_and_dashed_names(self):
        """Names may contain dots, dashes and underscores."""
        assert parse("mimo.pca-2_x").name == "mimo.pca-2_x"


class TestImplicitSequence:
    """Tests for leaves written directly against groups."""

    def test_groups_around_leaf(self):
        """A leaf between groups chains into a three-element sequence."""
        spec = parse("<thru>thru<thru>")

        assert spec.kind is GraphKind.SEQUENCE
        assert leaf_names(spec) == ["thru", "thru", "thru"]

    def test_leaf_before_group(self):
        """`a<b,c>` reads as `a:<b,c>`."""
        assert parse("a<b,c>") == parse("a:<b,c>")

    def test_group_before_leaf(self):
        """`<b,c>d` reads as `<b,c>:d`."""
        assert parse("<b,c>d") == parse("<b,c>:d")


class TestParseErrors:
    """Tests for rejected expressions."""

    @pytest.mark.parametrize("expression", ["<a,b", "a,b>", "<<a>", "a:<b,<c,d>"])
    def test_unbalanced_bracket_counts(self, expression):
        """Different numbers of '<' and '>' fail."""
        with pytest.raises(ParseError) as exc_info:
            parse(expression)

        assert exc_info.value.code == "UNBALANCED_BRACKETS"

    def test_closing_before_opening(self):
        """A '>' closing nothing fails even when counts match."""
        with pytest.raises(ParseError) as exc_info:
            parse("a>:<b")

        assert exc_info.value.code == "UNBALANCED_BRACKETS"

    @pytest.mark.parametrize("expression", ["", "   ", "a:", ":a", "a::b", "<a,>", "<,a>", "<>"])
    def test_empty_leaf(self, expression):
        """Missing names between separators fail with EMPTY_LEAF."""
        with pytest.raises(ParseError) as exc_info:
            parse(expression)

        assert exc_info.value.code == "EMPTY_LEAF"

    @pytest.mark.parametrize("expression", ["a,b", "a b", "a(b", "a(b)c", "(x)", "a$", "a(b)(c)", "a(b))", "<a(b)(c),d>"])
    def test_illegal_syntax(self, expression):
        """Malformed tokens fail with ILLEGAL_SYNTAX."""
        with pytest.raises(ParseError) as exc_info:
            parse(expression)

        assert exc_info.value.code == "ILLEGAL_SYNTAX"

    def test_error_details_carry_expression(self):
        """Errors report the expression and the offending span."""
        with pytest.raises(ParseError) as exc_info:
            parse("a:b:")

        details = exc_info.value.details
        assert details["expression"] == "a:b:"
        assert details["start"] == 4

    def test_non_string_input(self):
        """Only strings can be parsed."""
        with pytest.raises(ParseError):
            parse(None)


class TestGraphSpec:
    """Tests for the GraphSpec value type."""

    @pytest.mark.parametrize(
        "expression",
        ["a", "a:b:c", "<a,b>", "a:<b,c(x)>:d", "<a:b,<c,d>>"],
    )
    def test_to_expression_reparses_to_same_tree(self, expression):
        """Printing the canonical expression and parsing it is stable."""
        spec = parse(expression)

        assert parse(spec.to_expression()) == spec

    def test_spec_is_immutable(self):
        """GraphSpec instances cannot be modified."""
        spec = parse("a")

        with pytest.raises(AttributeError):
            spec.name = "b"

    def test_leaves_in_expression_order(self):
        """leaves() walks the tree depth first, left to right."""
        spec = parse("a:<b:c,d>:e")

        assert [leaf.name for leaf in spec.leaves()] == ["a", "b", "c", "d", "e"]
