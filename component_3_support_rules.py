"""
Component 3: Physical Support Rules

Decides whether an entity may be dropped onto the current top of a column.
A drop is illegal as soon as one rule is violated:

1. Small entities cannot support large ones
2. Balls roll off anything but boxes or the floor
3. Balls cannot support anything
4. Boxes cannot contain pyramids, planks or boxes of the same size
5. Small bricks and small pyramids cannot support boxes
6. Pyramids cannot support boxes of the same size

Dropping onto an empty column (the floor) is always allowed.

Author: Gripper Planner Team
Date: 2026-10-19
"""

from typing import Callable, List, Optional, Tuple

from component_2_world_model import Form, ObjectDefinition, Size

SupportRule = Callable[[ObjectDefinition, ObjectDefinition], bool]


def _small_supports_large(top: ObjectDefinition, held: ObjectDefinition) -> bool:
    return top.size is Size.SMALL and held.size is Size.LARGE


def _ball_off_box(top: ObjectDefinition, held: ObjectDefinition) -> bool:
    return top.form is not Form.BOX and held.form is Form.BALL


def _ball_supports(top: ObjectDefinition, held: ObjectDefinition) -> bool:
    return top.form is Form.BALL


def _box_holds_same_size(top: ObjectDefinition, held: ObjectDefinition) -> bool:
    return (
        top.form is Form.BOX
        and held.form in (Form.PYRAMID, Form.PLANK, Form.BOX)
        and top.size is held.size
    )


def _small_brick_or_pyramid_under_box(
    top: ObjectDefinition, held: ObjectDefinition
) -> bool:
    return (
        top.size is Size.SMALL
        and top.form in (Form.BRICK, Form.PYRAMID)
        and held.form is Form.BOX
    )


def _pyramid_under_same_size_box(top: ObjectDefinition, held: ObjectDefinition) -> bool:
    return top.form is Form.PYRAMID and held.form is Form.BOX and top.size is held.size


# (reason, predicate) pairs, checked in order
SUPPORT_RULES: List[Tuple[str, SupportRule]] = [
    ("small objects cannot support large objects", _small_supports_large),
    ("balls must be in boxes or on the floor", _ball_off_box),
    ("balls cannot support anything", _ball_supports),
    ("boxes cannot contain pyramids, planks or boxes of the same size", _box_holds_same_size),
    ("small bricks and pyramids cannot support boxes", _small_brick_or_pyramid_under_box),
    ("pyramids cannot support boxes of the same size", _pyramid_under_same_size_box),
]


def support_violation(
    top: Optional[ObjectDefinition], held: ObjectDefinition
) -> Optional[str]:
    """
    Return the reason the drop is illegal, or None if it is allowed.

    Args:
        top: Definition of the column's top entity (None for an empty column)
        held: Definition of the entity being dropped
    """
    if top is None:
        return None

    for reason, rule in SUPPORT_RULES:
        if rule(top, held):
            return reason
    return None


def can_support(top: Optional[ObjectDefinition], held: ObjectDefinition) -> bool:
    """True if ``held`` may be dropped onto ``top``."""
    return support_violation(top, held) is None
