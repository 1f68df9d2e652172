"""
Tests for script validation and the pattern registry.

Tests cover:
- Building registries from valid scripts
- Every validation failure kind and its payload
- Stage ordering (first failing stage wins)
- Cycle detection and reference depth limits
- Non-fatal warnings
"""

import pytest

from chuk_mcp_announcer.errors import (
    CyclicReference,
    DuplicateName,
    EmptyPattern,
    InvalidConjunction,
    InvalidName,
    MalformedReference,
    ReservedNameCollision,
    ScriptValidationError,
    TooDeep,
    UnknownReference,
)
from chuk_mcp_announcer.models import Pattern, TensePattern
from chuk_mcp_announcer.patterns import PatternRegistry, ValidationSeverity, validate_script
from chuk_mcp_announcer.patterns.template import parse_fragment
from chuk_mcp_announcer.patterns.validator import (
    build_dependency_graph,
    find_cycles,
    reference_depths,
)


def whole(name: str, *fragments: str) -> Pattern:
    return Pattern(name=name, is_entry_point=True, fragments=fragments)


def part(name: str, *fragments: str) -> Pattern:
    return Pattern(name=name, fragments=fragments)


def chain(length: int) -> list[Pattern]:
    """Patterns p0 -> p1 -> ... -> p<length>, with p<length> naming the title."""
    patterns = [whole("p0", "^p1^")] if length else [whole("p0", "^title^")]
    patterns += [part(f"p{i}", f"^p{i + 1}^") for i in range(1, length)]
    if length:
        patterns.append(part(f"p{length}", "^title^"))
    return patterns


class TestParseFragment:
    """Tests for fragment parsing."""

    def test_literal_only(self) -> None:
        template = parse_fragment("Hello there")
        assert template.references == ()
        assert len(template.tokens) == 1

    def test_references_in_order(self) -> None:
        template = parse_fragment("^moment^ ^title^ by ^artist^ (^title^)")
        assert template.references == ("moment", "title", "artist", "title")
        assert template.tag_references == frozenset({"title", "artist"})
        assert template.pattern_references == ("moment",)

    def test_adjacent_references(self) -> None:
        template = parse_fragment("^a^^b^")
        assert template.references == ("a", "b")


class TestRegistryBuild:
    """Tests for building valid registries."""

    def test_tutorial(self, tutorial_registry: PatternRegistry) -> None:
        assert tutorial_registry.entry_points == (
            "simple_title",
            "simple_title_album_and_artist",
            "simple_title_and_album",
            "tensed_simple_title_and_album",
        )
        assert "tensed_listen" in tutorial_registry
        assert len(tutorial_registry) == 5

    def test_dependencies(self, tutorial_registry: PatternRegistry) -> None:
        assert tutorial_registry.dependencies("simple_title_album_and_artist") == (
            "tensed_simple_title_and_album",
        )
        assert tutorial_registry.dependencies("tensed_simple_title_and_album") == (
            "tensed_listen",
        )
        assert tutorial_registry.dependencies("simple_title") == ()

    def test_tense_pattern_node(self, tutorial_registry: PatternRegistry) -> None:
        node = tutorial_registry.get_node("tensed_listen")
        assert isinstance(node, TensePattern)
        assert tutorial_registry.templates("tensed_listen") == ()

    def test_unknown_node(self, tutorial_registry: PatternRegistry) -> None:
        assert tutorial_registry.get_node("missing") is None

    def test_conjunctions(self, tutorial_registry: PatternRegistry) -> None:
        assert tutorial_registry.conjunctions == ("and after that,", "followed by")

    def test_no_conjunctions(self) -> None:
        registry = PatternRegistry.build([whole("a", "x")])
        assert registry.conjunctions == ("",)

    def test_reserved_identity_references(self) -> None:
        """id, path and parent may be referenced like tags."""
        registry = PatternRegistry.build([whole("a", "File ^path^ in ^parent^")])
        assert registry.entry_points == ("a",)

    def test_registry_is_read_only(self, tutorial_registry: PatternRegistry) -> None:
        with pytest.raises(TypeError):
            tutorial_registry._nodes["x"] = whole("x", "y")  # type: ignore[index]


class TestValidationErrors:
    """Tests for each validation failure."""

    @pytest.mark.parametrize("name", ["bad name", "", "dash-ed", "café"])
    def test_invalid_name(self, name: str) -> None:
        with pytest.raises(InvalidName) as exc_info:
            PatternRegistry.build([whole(name, "x")])
        assert exc_info.value.name == name

    def test_invalid_tense_pattern_name(self) -> None:
        with pytest.raises(InvalidName):
            PatternRegistry.build(
                [whole("a", "x")], [TensePattern(name="no spaces", past="p", present="q")]
            )

    @pytest.mark.parametrize("name", ["title", "path", "album_artist"])
    def test_reserved_name(self, name: str) -> None:
        with pytest.raises(ReservedNameCollision) as exc_info:
            PatternRegistry.build([whole(name, "x")])
        assert exc_info.value.name == name

    def test_duplicate_pattern(self) -> None:
        with pytest.raises(DuplicateName):
            PatternRegistry.build([whole("a", "x"), whole("a", "y")])

    def test_duplicate_across_kinds(self) -> None:
        """Patterns and tense patterns share one namespace."""
        with pytest.raises(DuplicateName) as exc_info:
            PatternRegistry.build(
                [whole("moment", "x")], [TensePattern(name="moment", past="p", present="q")]
            )
        assert exc_info.value.name == "moment"

    def test_empty_pattern(self) -> None:
        with pytest.raises(EmptyPattern) as exc_info:
            PatternRegistry.build([Pattern(name="a", is_entry_point=True)])
        assert exc_info.value.name == "a"

    def test_odd_delimiters(self) -> None:
        with pytest.raises(MalformedReference) as exc_info:
            PatternRegistry.build([whole("a", "Hello ^title")])
        assert exc_info.value.fragment == "Hello ^title"

    @pytest.mark.parametrize("reference", ["foo bar", "", "a-b"])
    def test_malformed_reference(self, reference: str) -> None:
        fragment = f"Hello ^{reference}^"
        with pytest.raises(MalformedReference) as exc_info:
            PatternRegistry.build([whole("a", fragment)])
        assert exc_info.value.reference == reference
        assert exc_info.value.fragment == fragment

    def test_unknown_reference(self) -> None:
        with pytest.raises(UnknownReference) as exc_info:
            PatternRegistry.build([whole("a", "Hello ^nope^")])
        assert exc_info.value.name == "a"
        assert exc_info.value.reference == "nope"

    def test_self_reference(self) -> None:
        with pytest.raises(CyclicReference) as exc_info:
            PatternRegistry.build([whole("a", "again ^a^")])
        assert exc_info.value.cycle == ["a", "a"]

    def test_indirect_cycle(self) -> None:
        with pytest.raises(CyclicReference) as exc_info:
            PatternRegistry.build(
                [whole("a", "^b^"), part("b", "^c^", "done"), part("c", "^a^")]
            )
        assert exc_info.value.cycle == ["a", "b", "c", "a"]

    def test_cycle_through_unused_fragment(self) -> None:
        """A cycle is rejected even when other fragments could avoid it."""
        with pytest.raises(CyclicReference):
            PatternRegistry.build([whole("a", "plain", "^b^"), part("b", "^a^")])

    def test_invalid_conjunction(self) -> None:
        with pytest.raises(InvalidConjunction) as exc_info:
            PatternRegistry.build([whole("a", "x")], conjunctions=["and ^title^"])
        assert exc_info.value.fragment == "and ^title^"

    def test_error_family(self) -> None:
        with pytest.raises(ScriptValidationError):
            PatternRegistry.build([whole("a", "^nope^")])

    def test_error_carries_result(self) -> None:
        with pytest.raises(UnknownReference) as exc_info:
            PatternRegistry.build([whole("a", "^x^ ^y^")])
        result = exc_info.value.result
        assert result is not None
        assert not result.is_valid
        assert [e.context["reference"] for e in result.errors] == ["x", "y"]


class TestValidationOrder:
    """The first failing stage is the one reported."""

    def test_name_checked_before_references(self) -> None:
        result = validate_script([whole("bad name", "^nope^")])
        assert [e.code for e in result.errors] == ["INVALID_NAME"]

    def test_references_checked_before_cycles(self) -> None:
        result = validate_script([whole("a", "^a^ ^nope^")])
        assert [e.code for e in result.errors] == ["UNKNOWN_REFERENCE"]

    def test_odd_delimiters_skip_reference_lookup(self) -> None:
        result = validate_script([whole("a", "^nope^ ^")])
        assert [e.code for e in result.errors] == ["MALFORMED_REFERENCE"]


class TestValidationWarnings:
    """Non-fatal issues."""

    def test_valid_script(self) -> None:
        result = validate_script([whole("a", "x")])
        assert result.is_valid
        assert bool(result)
        assert "no issues" in str(result)

    def test_no_entry_points(self) -> None:
        registry = PatternRegistry.build([part("a", "x")])
        assert registry.entry_points == ()
        assert [w.code for w in registry.validation.warnings] == ["NO_ENTRY_POINTS"]

    def test_unused_pattern(self) -> None:
        result = validate_script([whole("a", "x"), part("b", "y")])
        assert result.is_valid
        info = [i for i in result.issues if i.severity == ValidationSeverity.INFO]
        assert [i.code for i in info] == ["UNUSED_PATTERN"]
        assert info[0].location == "pattern/b"


class TestCycleDetection:
    """Tests for the dependency graph walk."""

    def test_graph_skips_tags(self) -> None:
        graph = build_dependency_graph(
            [whole("a", "^b^ ^title^", "^b^ again ^c^"), part("b", "x"), part("c", "y")]
        )
        assert graph == {"a": ("b", "c"), "b": (), "c": ()}

    def test_diamond_is_not_a_cycle(self) -> None:
        graph = {"a": ("b", "c"), "b": ("d",), "c": ("d",), "d": ()}
        assert find_cycles(graph) == []

    def test_self_loop(self) -> None:
        assert find_cycles({"a": ("a",)}) == [["a", "a"]]

    def test_two_node_cycle(self) -> None:
        assert find_cycles({"a": ("b",), "b": ("a",)}) == [["a", "b", "a"]]

    def test_long_chain_has_no_cycle(self) -> None:
        graph = {f"n{i}": (f"n{i + 1}",) for i in range(5000)}
        graph["n5000"] = ()
        assert find_cycles(graph) == []

    def test_long_cycle(self) -> None:
        graph = {f"n{i}": (f"n{(i + 1) % 3000}",) for i in range(3000)}
        cycles = find_cycles(graph)
        assert len(cycles) == 1
        assert len(cycles[0]) == 3001
        assert cycles[0][0] == cycles[0][-1]


class TestReferenceDepth:
    """Tests for the nesting depth limit."""

    def test_depths(self) -> None:
        graph = {"a": ("b", "c"), "b": ("d",), "c": (), "d": ("e",), "e": ()}
        assert reference_depths(graph) == {"a": 3, "b": 2, "c": 0, "d": 1, "e": 0}

    def test_depth_counts_unlisted_names(self) -> None:
        """Tense patterns are leaves of the pattern graph."""
        assert reference_depths({"a": ("moment",)}) == {"a": 1, "moment": 0}

    def test_long_chain_depths(self) -> None:
        graph = {f"n{i}": (f"n{i + 1}",) for i in range(5000)}
        graph["n5000"] = ()
        depths = reference_depths(graph)
        assert depths["n0"] == 5000
        assert depths["n4999"] == 1

    def test_tutorial_within_limit(self, tutorial_registry: PatternRegistry) -> None:
        assert tutorial_registry.validation.is_valid

    def test_chain_at_limit(self) -> None:
        registry = PatternRegistry.build(chain(5))
        assert registry.entry_points == ("p0",)

    def test_chain_past_limit(self) -> None:
        with pytest.raises(TooDeep) as exc_info:
            PatternRegistry.build(chain(6))
        assert exc_info.value.name == "p0"
        assert exc_info.value.depth == 6
        assert isinstance(exc_info.value, ScriptValidationError)

    def test_very_long_chain_rejected(self) -> None:
        with pytest.raises(TooDeep) as exc_info:
            PatternRegistry.build(chain(1200))
        assert exc_info.value.name == "p0"
        assert exc_info.value.depth == 1200
        assert exc_info.value.code == "TOO_DEEP"

    def test_every_deep_pattern_reported(self) -> None:
        result = validate_script(chain(7))
        assert [e.context["name"] for e in result.errors] == ["p0", "p1"]
        assert result.errors[0].location == "pattern/p0"

    def test_raised_limit(self) -> None:
        registry = PatternRegistry.build(chain(8), depth_limit=10)
        assert "p8" in registry

    def test_zero_limit(self) -> None:
        assert PatternRegistry.build(chain(0), depth_limit=0).entry_points == ("p0",)
        with pytest.raises(TooDeep):
            PatternRegistry.build(chain(1), depth_limit=0)

    def test_tense_pattern_counts(self) -> None:
        result = validate_script(
            [whole("a", "^b^"), part("b", "^moment^")],
            [TensePattern(name="moment", past="was", present="is")],
            depth_limit=1,
        )
        assert [e.code for e in result.errors] == ["TOO_DEEP"]

    def test_cycles_checked_before_depth(self) -> None:
        result = validate_script([whole("a", "^b^"), part("b", "^a^")], depth_limit=0)
        assert [e.code for e in result.errors] == ["CYCLIC_REFERENCE"]
