"""
Condition evaluation.

Named conditions are evaluated once per execution into a cache; inline
predicates are called with the context whenever they are reached. Both go
through ``evaluate_condition`` which dispatches on the condition's tag.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..errors import UnknownConditionError
from ..types import ConditionKind, ConditionRef, ConditionsMap

EvaluatedConditions = dict[str, bool]


def evaluate_conditions(conditions: ConditionsMap, context: Any) -> EvaluatedConditions:
    """Evaluate every condition in the map against one context snapshot."""
    return {key: bool(fn(context)) for key, fn in conditions.items()}


def evaluate_condition(condition: ConditionRef, context: Any, evaluated: EvaluatedConditions) -> bool:
    if condition.kind is ConditionKind.NAMED:
        try:
            return evaluated[condition.key]
        except KeyError:
            raise UnknownConditionError(condition.key) from None
    return bool(condition.predicate(context))


def all_hold(conditions: Iterable[ConditionRef], context: Any, evaluated: EvaluatedConditions) -> bool:
    """True when every condition holds. Short-circuits on the first failure."""
    return all(evaluate_condition(c, context, evaluated) for c in conditions)


def any_fails(conditions: Iterable[ConditionRef], context: Any, evaluated: EvaluatedConditions) -> bool:
    return any(not evaluate_condition(c, context, evaluated) for c in conditions)
