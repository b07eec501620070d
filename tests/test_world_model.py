"""
tests/test_world_model.py

Unit tests for Component 2: World Model.

Tests cover:
- Object definitions and catalog parsing
- WorldState copying, equality, lookup and invariant checks
- Literal and formula notation
- YAML world loading
"""

from pathlib import Path

import pytest

from component_2_world_model import (
    Form,
    Literal,
    ObjectDefinition,
    Relation,
    Size,
    WorldState,
    format_formula,
    load_world,
    parse_formula,
    world_from_dict,
)
from gripper_exceptions import FormulaParseError, InvalidWorldError

WORLDS_DIR = Path(__file__).resolve().parent.parent / "worlds"


# ==================== Object Definitions ====================


class TestObjectDefinition:
    """Test catalog entries."""

    def test_from_dict(self):
        definition = ObjectDefinition.from_dict(
            {"form": "box", "size": "large", "color": "red"}
        )

        assert definition.form is Form.BOX
        assert definition.size is Size.LARGE
        assert definition.color == "red"

    def test_from_dict_is_case_insensitive(self):
        definition = ObjectDefinition.from_dict({"form": "Ball", "size": "SMALL"})

        assert definition.form is Form.BALL
        assert definition.size is Size.SMALL
        assert definition.color == ""

    def test_unknown_form_rejected(self):
        with pytest.raises(InvalidWorldError):
            ObjectDefinition.from_dict({"form": "cylinder", "size": "small"})

    def test_missing_size_rejected(self):
        with pytest.raises(InvalidWorldError):
            ObjectDefinition.from_dict({"form": "brick"})


# ==================== World State ====================


class TestWorldState:
    """Test state value semantics and lookups."""

    def test_copy_shares_no_lists(self):
        state = WorldState(stacks=[["a", "b"], []], holding=None, arm=0)
        clone = state.copy()

        clone.stacks[0].pop()
        clone.stacks[1].append("b")

        assert state.stacks == [["a", "b"], []]
        assert clone != state

    def test_structural_equality_and_hash(self):
        first = WorldState(stacks=[["a"], ["b"]], holding=None, arm=1)
        second = WorldState(stacks=[["a"], ["b"]], holding=None, arm=1)

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_arm_and_holding_distinguish_states(self):
        base = WorldState(stacks=[["a"], []], holding=None, arm=0)

        assert base != WorldState(stacks=[["a"], []], holding=None, arm=1)
        assert base != WorldState(stacks=[[], []], holding="a", arm=0)

    def test_locate(self):
        state = WorldState(stacks=[["a", "b"], ["c"]], holding="d", arm=0)

        assert state.locate("b") == (0, 1)
        assert state.locate("c") == (1, 0)
        assert state.locate("d") is None

    def test_entities_include_held(self):
        state = WorldState(stacks=[["a"], ["b", "c"]], holding="d", arm=0)

        assert sorted(state.entities()) == ["a", "b", "c", "d"]

    def test_top(self):
        state = WorldState(stacks=[["a", "b"], []], arm=0)

        assert state.top(0) == "b"
        assert state.top(1) is None

    def test_validate_rejects_duplicates(self):
        state = WorldState(stacks=[["a"], ["a"]], arm=0)

        with pytest.raises(InvalidWorldError):
            state.validate()

    def test_validate_rejects_held_and_stacked(self):
        state = WorldState(stacks=[["a"], []], holding="a", arm=0)

        with pytest.raises(InvalidWorldError):
            state.validate()

    def test_validate_rejects_arm_out_of_range(self):
        state = WorldState(stacks=[["a"], []], arm=2)

        with pytest.raises(InvalidWorldError):
            state.validate()

    def test_validate_rejects_unknown_entity(self):
        state = WorldState(stacks=[["a"], ["z"]], arm=0)
        catalog = {"a": ObjectDefinition(Form.BRICK, Size.SMALL)}

        with pytest.raises(InvalidWorldError):
            state.validate(catalog)

    def test_to_string(self):
        state = WorldState(stacks=[["a", "b"], []], holding="c", arm=1)

        assert state.to_string() == "arm=1 holding=c stacks=[a b] []"


# ==================== Literals and Formulas ====================


class TestLiteralNotation:
    """Test parsing and rendering of goal literals."""

    def test_parse_binary(self):
        literal = Literal.parse("ontop(a, floor)")

        assert literal.relation is Relation.ONTOP
        assert literal.args == ("a", "floor")
        assert literal.polarity is True
        assert literal.refers_to_floor

    def test_parse_negated(self):
        literal = Literal.parse("-beside(a,b)")

        assert literal.polarity is False
        assert str(literal) == "-beside(a,b)"

    def test_parse_unary(self):
        literal = Literal.parse("holding(k)")

        assert literal.first == "k"
        assert literal.second is None

    def test_unknown_relation(self):
        with pytest.raises(FormulaParseError):
            Literal.parse("near(a,b)")

    def test_wrong_arity(self):
        with pytest.raises(FormulaParseError):
            Literal.parse("holding(a,b)")

    def test_malformed(self):
        with pytest.raises(FormulaParseError):
            Literal.parse("ontop a b")

    def test_parse_formula(self):
        formula = parse_formula("ontop(a,floor) & holding(b) | beside(a,c)")

        assert len(formula) == 2
        assert [str(lit) for lit in formula[0]] == ["ontop(a,floor)", "holding(b)"]
        assert format_formula(formula) == "ontop(a,floor) & holding(b) | beside(a,c)"

    def test_empty_formula_rejected(self):
        with pytest.raises(FormulaParseError):
            parse_formula("   ")

    def test_relation_inverse(self):
        assert Relation.RIGHTOF.inverse is Relation.LEFTOF
        assert Relation.UNDER.inverse is Relation.ABOVE
        assert Relation.BESIDE.inverse is None


# ==================== World Loading ====================


class TestWorldLoading:
    """Test building worlds from mappings and YAML files."""

    def test_world_from_dict(self):
        world = world_from_dict(
            {
                "arm": 1,
                "holding": "b",
                "stacks": [["a"], []],
                "objects": {
                    "a": {"form": "brick", "size": "large", "color": "green"},
                    "b": {"form": "ball", "size": "small", "color": "white"},
                },
            }
        )

        assert world.state == WorldState(stacks=[["a"], []], holding="b", arm=1)
        assert world.catalog["b"].form is Form.BALL

    def test_world_from_dict_missing_objects(self):
        with pytest.raises(InvalidWorldError):
            world_from_dict({"stacks": [["a"]]})

    def test_world_from_dict_entity_without_definition(self):
        with pytest.raises(InvalidWorldError):
            world_from_dict({"stacks": [["a"]], "objects": {}})

    def test_load_world_from_file(self, tmp_path):
        path = tmp_path / "tiny.yml"
        path.write_text(
            "stacks:\n"
            "  - [a]\n"
            "  - []\n"
            "objects:\n"
            "  a: {form: plank, size: small, color: red}\n",
            encoding="utf-8",
        )

        world = load_world(path)

        assert world.name == "tiny"
        assert world.state.arm == 0
        assert world.state.holding is None
        assert world.state.stacks == [["a"], []]

    def test_load_world_yaml_error(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("stacks: [[a\n", encoding="utf-8")

        with pytest.raises(InvalidWorldError) as exc_info:
            load_world(path)

        assert exc_info.value.original_exception is not None

    def test_load_world_missing_file(self, tmp_path):
        with pytest.raises(InvalidWorldError):
            load_world(tmp_path / "nowhere.yml")

    def test_shipped_small_world(self):
        world = load_world(WORLDS_DIR / "small.yml")

        assert world.state.num_columns == 5
        assert sorted(world.state.entities()) == sorted(world.catalog)
