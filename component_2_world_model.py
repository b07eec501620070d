"""
Component 2: World Model

Types describing the stack world and the goals the planner works towards:
- Form/Size enums and ObjectDefinition (the object catalog entries)
- WorldState: arm column, held entity, stacks of entity ids
- Relation enum and Literal for goal formulas in disjunctive normal form
- Text notation for literals and formulas ("ontop(a,floor) & holding(b) | ...")
- YAML world loading

Author: Gripper Planner Team
Date: 2026-10-19
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from common.constants import FLOOR
from component_1_logging_config import get_logger
from gripper_exceptions import FormulaParseError, InvalidWorldError, wrap_exception

logger = get_logger(__name__)

# ============================================================================
# Object Catalog
# ============================================================================


class Form(Enum):
    """Shapes an entity can have."""

    BRICK = "brick"
    PLANK = "plank"
    BALL = "ball"
    PYRAMID = "pyramid"
    BOX = "box"
    TABLE = "table"


class Size(Enum):
    """Entity sizes."""

    SMALL = "small"
    LARGE = "large"


@dataclass(frozen=True)
class ObjectDefinition:
    """
    Static description of one entity.

    Attributes:
        form: Shape of the entity
        size: Size class of the entity
        color: Free-form color name
    """

    form: Form
    size: Size
    color: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectDefinition":
        """Build from ``{"form": ..., "size": ..., "color": ...}``."""
        try:
            form = Form(str(data["form"]).lower())
            size = Size(str(data["size"]).lower())
        except KeyError as e:
            raise InvalidWorldError(
                f"Object definition lacks field {e}", context={"definition": data}
            )
        except ValueError as e:
            raise wrap_exception(
                e, InvalidWorldError, "Unknown form or size", definition=data
            )
        return cls(form=form, size=size, color=str(data.get("color", "")))

    def __str__(self) -> str:
        return f"{self.size.value} {self.color} {self.form.value}".replace("  ", " ")


ObjectCatalog = Dict[str, ObjectDefinition]


# ============================================================================
# World State
# ============================================================================


@dataclass
class WorldState:
    """
    Configuration of the stack world.

    Attributes:
        stacks: Columns of entity ids, each listed bottom to top
        holding: Entity currently in the gripper (None if empty)
        arm: Column index the arm is positioned over
    """

    stacks: List[List[str]] = field(default_factory=list)
    holding: Optional[str] = None
    arm: int = 0

    def key(self) -> Tuple[Tuple[Tuple[str, ...], ...], Optional[str], int]:
        """Immutable structural key used for hashing and equality."""
        return (tuple(tuple(stack) for stack in self.stacks), self.holding, self.arm)

    def __hash__(self):
        return hash(self.key())

    def __eq__(self, other):
        if not isinstance(other, WorldState):
            return False
        return self.key() == other.key()

    def copy(self) -> "WorldState":
        """Structural copy; the new state shares no lists with this one."""
        return WorldState(
            stacks=[list(stack) for stack in self.stacks],
            holding=self.holding,
            arm=self.arm,
        )

    @property
    def num_columns(self) -> int:
        return len(self.stacks)

    def entities(self) -> List[str]:
        """All entity ids in the world, including the held one."""
        result = [entity for stack in self.stacks for entity in stack]
        if self.holding is not None:
            result.append(self.holding)
        return result

    def locate(self, entity: str) -> Optional[Tuple[int, int]]:
        """Return (column, position) of an entity, or None if held or absent."""
        for column, stack in enumerate(self.stacks):
            if entity in stack:
                return column, stack.index(entity)
        return None

    def top(self, column: int) -> Optional[str]:
        """Topmost entity of a column, None for an empty column."""
        stack = self.stacks[column]
        return stack[-1] if stack else None

    def validate(self, catalog: Optional[ObjectCatalog] = None) -> None:
        """
        Check the state invariants.

        Raises:
            InvalidWorldError: duplicated entity, arm out of range, or
                entity missing from the catalog
        """
        if not self.stacks:
            raise InvalidWorldError("World has no columns")

        if not 0 <= self.arm < len(self.stacks):
            raise InvalidWorldError(
                "Arm outside column range",
                context={"arm": self.arm, "columns": len(self.stacks)},
            )

        seen = set()
        for entity in self.entities():
            if entity in seen:
                raise InvalidWorldError(
                    f"Entity '{entity}' appears more than once",
                    context={"entity": entity},
                )
            seen.add(entity)

            if catalog is not None and entity not in catalog:
                raise InvalidWorldError(
                    f"Entity '{entity}' has no object definition",
                    context={"entity": entity},
                )

    def to_string(self) -> str:
        """Human-readable state description."""
        columns = " ".join(f"[{' '.join(stack)}]" for stack in self.stacks)
        return f"arm={self.arm} holding={self.holding or '-'} stacks={columns}"


# ============================================================================
# Goal Formulas
# ============================================================================


class Relation(Enum):
    """Spatial relations a goal literal can assert."""

    LEFTOF = "leftof"
    RIGHTOF = "rightof"
    BESIDE = "beside"
    ONTOP = "ontop"
    INSIDE = "inside"
    ABOVE = "above"
    UNDER = "under"
    HOLDING = "holding"

    @property
    def arity(self) -> int:
        return 1 if self is Relation.HOLDING else 2

    @property
    def inverse(self) -> Optional["Relation"]:
        """Relation with swapped arguments, for the directional relations."""
        inverses = {
            Relation.LEFTOF: Relation.RIGHTOF,
            Relation.RIGHTOF: Relation.LEFTOF,
            Relation.ABOVE: Relation.UNDER,
            Relation.UNDER: Relation.ABOVE,
        }
        return inverses.get(self)


_LITERAL_PATTERN = re.compile(r"^\s*(-?)\s*([A-Za-z]+)\s*\(([^()]*)\)\s*$")


@dataclass(frozen=True)
class Literal:
    """
    Atomic relational assertion.

    Attributes:
        relation: The asserted relation
        args: Entity ids, or FLOOR as the second argument
        polarity: False for negated literals (modelled, not evaluated)
    """

    relation: Relation
    args: Tuple[str, ...]
    polarity: bool = True

    @property
    def first(self) -> str:
        return self.args[0]

    @property
    def second(self) -> Optional[str]:
        return self.args[1] if len(self.args) > 1 else None

    @property
    def refers_to_floor(self) -> bool:
        return self.second == FLOOR

    @classmethod
    def parse(cls, text: str) -> "Literal":
        """
        Parse ``relation(arg1,arg2)``; a leading ``-`` negates the literal.

        Raises:
            FormulaParseError: for malformed text, unknown relations or
                a wrong number of arguments
        """
        match = _LITERAL_PATTERN.match(text)
        if not match:
            raise FormulaParseError("Malformed literal", text=text)

        negated, name, raw_args = match.groups()
        try:
            relation = Relation(name.lower())
        except ValueError:
            raise FormulaParseError(f"Unknown relation '{name}'", text=text)

        args = tuple(arg.strip() for arg in raw_args.split(",") if arg.strip())
        if len(args) != relation.arity:
            raise FormulaParseError(
                f"'{relation.value}' takes {relation.arity} argument(s), got {len(args)}",
                text=text,
            )

        return cls(relation=relation, args=args, polarity=not negated)

    def __str__(self) -> str:
        return f"{'' if self.polarity else '-'}{self.relation.value}({','.join(self.args)})"


DNFFormula = List[List[Literal]]


def format_formula(formula: DNFFormula) -> str:
    """Render a DNF formula as ``lit & lit | lit``."""
    return " | ".join(
        " & ".join(str(literal) for literal in conjunction) for conjunction in formula
    )


def parse_formula(text: str) -> DNFFormula:
    """
    Parse the notation produced by format_formula.

    Example:
        >>> parse_formula("ontop(a,floor) & holding(b) | beside(a,b)")
    """
    if not text or not text.strip():
        raise FormulaParseError("Empty goal formula", text=text)

    formula: DNFFormula = []
    for raw_conjunction in text.split("|"):
        conjunction = [
            Literal.parse(raw_literal)
            for raw_literal in raw_conjunction.split("&")
            if raw_literal.strip()
        ]
        if not conjunction:
            raise FormulaParseError("Empty conjunction", text=text)
        formula.append(conjunction)
    return formula


# ============================================================================
# World Loading
# ============================================================================


@dataclass
class World:
    """Initial state together with the catalog describing its entities."""

    state: WorldState
    catalog: ObjectCatalog
    name: str = ""


def world_from_dict(data: Dict[str, Any], name: str = "") -> World:
    """
    Build a World from a plain mapping.

    Expected keys: ``stacks`` (list of lists), ``objects`` (id -> definition),
    optional ``arm`` (default 0) and ``holding`` (default None).
    """
    if not isinstance(data, dict):
        raise InvalidWorldError("World description must be a mapping", context={"name": name})

    try:
        stacks = [[str(entity) for entity in stack or []] for stack in data["stacks"]]
        objects = data["objects"]
    except KeyError as e:
        raise InvalidWorldError(f"World description lacks {e}", context={"name": name})

    catalog = {
        str(entity): ObjectDefinition.from_dict(definition)
        for entity, definition in objects.items()
    }
    holding = data.get("holding")
    state = WorldState(
        stacks=stacks,
        holding=str(holding) if holding is not None else None,
        arm=int(data.get("arm", 0)),
    )
    state.validate(catalog)

    return World(state=state, catalog=catalog, name=name)


def load_world(path: Union[str, Path]) -> World:
    """
    Load a world from a YAML file.

    Raises:
        InvalidWorldError: unreadable file, YAML syntax error or an
            inconsistent world
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise wrap_exception(e, InvalidWorldError, "YAML error in world file", path=str(path))
    except OSError as e:
        raise wrap_exception(e, InvalidWorldError, "Cannot read world file", path=str(path))

    world = world_from_dict(data, name=path.stem)
    logger.info(
        f"World '{world.name}' loaded",
        extra={"columns": world.state.num_columns, "objects": len(world.catalog)},
    )
    return world
