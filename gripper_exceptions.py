"""
gripper_exceptions.py

Central exception hierarchy for the gripper planner.

Exception hierarchy:
    GripperPlannerException (base)
    ├── PlanningException
    │   ├── SearchTimeout
    │   ├── SearchExhausted
    │   └── IllegalActionError
    └── WorldModelException
        ├── InvalidWorldError
        └── FormulaParseError

Usage:
    from gripper_exceptions import SearchTimeout, SearchExhausted

    try:
        result = planner.plan(formula, state)
    except SearchTimeout as e:
        logger.warning(f"Planning timed out: {e}")
        logger.warning(f"Expansions: {e.statistics.expansions}")
"""

from typing import Any, Dict, Optional


class GripperPlannerException(Exception):
    """
    Base exception for all planner errors.

    Every planner exception carries:
    - A readable message
    - A context dict with diagnostic values
    - An optional original exception (for wrapped errors)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# PLANNING EXCEPTIONS
# ============================================================================


class PlanningException(GripperPlannerException):
    """Base exception for search and plan execution errors."""


class _SearchFailure(PlanningException):
    """Search ended without reaching a goal state; keeps the run statistics."""

    def __init__(self, message: str, statistics: Any = None, **kwargs):
        context = kwargs.get("context", {})
        if statistics is not None:
            context["expansions"] = statistics.expansions
            context["elapsed_seconds"] = round(statistics.elapsed_seconds, 3)
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.statistics = statistics


class SearchTimeout(_SearchFailure):
    """
    The time budget ran out before a goal state was found.

    Retrying with a larger budget may succeed.
    """


class SearchExhausted(_SearchFailure):
    """
    The frontier emptied without satisfying the goal.

    The goal is unreachable from the initial state under the transition
    rules; retrying with the same inputs will fail again.
    """


class IllegalActionError(PlanningException):
    """
    An action was applied in a state where it is not legal.

    Causes:
    - Moving past the first or last column
    - Picking with a full hand or from an empty column
    - Dropping with an empty hand or onto an unsupporting top entity
    """

    def __init__(
        self,
        message: str,
        action: Optional[str] = None,
        step_index: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["action"] = action
        if step_index is not None:
            context["step_index"] = step_index
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# WORLD MODEL EXCEPTIONS
# ============================================================================


class WorldModelException(GripperPlannerException):
    """Base exception for world and goal formula errors."""


class InvalidWorldError(WorldModelException):
    """
    World description is inconsistent.

    Causes:
    - Entity placed twice (or both in a stack and in the gripper)
    - Entity without catalog entry
    - Unknown form or size
    - Arm outside the column range
    """


class FormulaParseError(WorldModelException):
    """Literal or goal formula text could not be parsed."""

    def __init__(self, message: str, text: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["text"] = text
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    exc: Exception,
    exception_class: type,
    message: str,
    **context,
) -> GripperPlannerException:
    """
    Wrap a generic exception into a planner exception.

    Example:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise wrap_exception(e, InvalidWorldError, "Bad world file", path=str(path))
    """
    return exception_class(message=message, context=context, original_exception=exc)


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Build a short user-facing message for an exception.

    Args:
        exc: The exception
        include_details: Append the technical message and context

    Returns:
        Message suitable for display to an operator
    """
    friendly_messages = {
        SearchTimeout: "[ERROR] Planning took too long. Try again with a larger time budget.",
        SearchExhausted: "[ERROR] That goal cannot be reached from the current world.",
        IllegalActionError: "[ERROR] The plan contains a move the arm cannot perform.",
        InvalidWorldError: "[ERROR] The world description is inconsistent.",
        FormulaParseError: "[ERROR] The goal could not be read.",
    }

    default_message = "[ERROR] An unexpected error occurred."

    user_message = friendly_messages.get(type(exc), default_message)

    if isinstance(exc, IllegalActionError) and exc.context.get("step_index") is not None:
        user_message = (
            f"[ERROR] Step {exc.context['step_index'] + 1} of the plan "
            f"({exc.context.get('action')}) cannot be performed."
        )

    if include_details and isinstance(exc, GripperPlannerException):
        user_message += f"\n\nDetails: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message
