"""
Attribute-based policy evaluation.

Pure functions: no database access, no logging, no mutation of inputs.
Given candidate policies and a request (action, resource, context) the
evaluator returns an ALLOW or DENY Decision.

Combination rule:
  1. A policy is applicable when the action is in its actions, the
     resource is in its resources and every condition is satisfied.
  2. Any applicable DENY wins.
  3. Otherwise any applicable ALLOW allows.
  4. Otherwise DENY (nothing applies).

Conditions map context attribute names to expectations:
  {"department": "financial"}             equality
  {"tags": ["a", "b"]}                     list equality
  {"device": {"managed": True}}            nested presence + equality
  {"clearance": {"$gte": 3}}               operator expression
  {"region": {"$in": ["eu", "us"]}}
  {"on_call": {"$exists": False}}

Operators: $eq $ne $in $nin $gt $gte $lt $lte $exists. An object whose
keys all start with "$" is an operator expression; anything else is a
nested attribute map.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from iam.models.policy import Policy, PolicyEffect

_MISSING = object()


@dataclass(frozen=True)
class PolicyRule:
    """Immutable view of a policy as seen by the evaluator"""

    effect: PolicyEffect
    actions: tuple[str, ...]
    resources: tuple[str, ...]
    conditions: Mapping[str, Any] = field(default_factory=dict)
    code: str | None = None

    @classmethod
    def from_policy(cls, policy: Policy) -> "PolicyRule":
        return cls(
            effect=PolicyEffect(policy.effect),
            actions=tuple(policy.actions or ()),
            resources=tuple(policy.resources or ()),
            conditions=dict(policy.conditions or {}),
            code=policy.code,
        )

    @classmethod
    def implicit_deny(cls, action: str, resource: str) -> "PolicyRule":
        """Stand-in for a role-permission association that has no policy"""
        return cls(effect=PolicyEffect.DENY, actions=(action,), resources=(resource,))


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization decision"""

    allowed: bool
    reason: str
    policy_code: str | None = None

    @property
    def effect(self) -> PolicyEffect:
        return PolicyEffect.ALLOW if self.allowed else PolicyEffect.DENY

    @classmethod
    def allow(cls, reason: str, policy_code: str | None = None) -> "Decision":
        return cls(allowed=True, reason=reason, policy_code=policy_code)

    @classmethod
    def deny(cls, reason: str, policy_code: str | None = None) -> "Decision":
        return cls(allowed=False, reason=reason, policy_code=policy_code)


def _strict_equals(expected: Any, actual: Any) -> bool:
    # JSON booleans never equal numbers
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    if isinstance(expected, list) and isinstance(actual, (list, tuple)):
        return len(expected) == len(actual) and all(
            _strict_equals(e, a) for e, a in zip(expected, actual)
        )
    if isinstance(expected, dict) and isinstance(actual, Mapping):
        return expected.keys() == actual.keys() and all(
            _strict_equals(v, actual[k]) for k, v in expected.items()
        )
    return expected == actual


def _ordered(expected: Any, actual: Any) -> bool:
    """True when both sides can be compared with < and >"""
    if isinstance(expected, bool) or isinstance(actual, bool):
        return False
    numeric = (int, float)
    if isinstance(expected, numeric) and isinstance(actual, numeric):
        return True
    return isinstance(expected, str) and isinstance(actual, str)


def _is_operator_expression(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value) and all(
        isinstance(key, str) and key.startswith("$") for key in value
    )


def _apply_operator(operator: str, operand: Any, actual: Any) -> bool:
    if operator == "$exists":
        return (actual is not _MISSING) == bool(operand)
    if actual is _MISSING:
        return False
    if operator == "$eq":
        return _strict_equals(operand, actual)
    if operator == "$ne":
        return not _strict_equals(operand, actual)
    if operator in ("$in", "$nin"):
        if not isinstance(operand, (list, tuple)):
            return False
        found = any(_strict_equals(candidate, actual) for candidate in operand)
        return found if operator == "$in" else not found
    if operator in ("$gt", "$gte", "$lt", "$lte"):
        if not _ordered(operand, actual):
            return False
        if operator == "$gt":
            return actual > operand
        if operator == "$gte":
            return actual >= operand
        if operator == "$lt":
            return actual < operand
        return actual <= operand
    # unknown operator: condition unmet
    return False


def _condition_holds(expected: Any, actual: Any) -> bool:
    if _is_operator_expression(expected):
        return all(
            _apply_operator(operator, operand, actual)
            for operator, operand in expected.items()
        )
    if actual is _MISSING:
        return False
    if isinstance(expected, Mapping):
        if not isinstance(actual, Mapping):
            return False
        return matches_conditions(expected, actual)
    return _strict_equals(expected, actual)


def matches_conditions(conditions: Mapping[str, Any] | None, context: Mapping[str, Any] | None) -> bool:
    """
    Check every condition against the request context.

    Args:
        conditions: Attribute expectations (empty or None means unconditional)
        context: Request attributes

    Returns:
        True if all conditions hold
    """
    if not conditions:
        return True
    context = context or {}
    return all(
        _condition_holds(expected, context.get(key, _MISSING))
        for key, expected in conditions.items()
    )


def is_applicable(rule: PolicyRule, action: str, resource: str, context: Mapping[str, Any] | None) -> bool:
    """Check if a policy governs this (action, resource, context)"""
    return (
        action in rule.actions
        and resource in rule.resources
        and matches_conditions(rule.conditions, context)
    )


def _sort_key(rule: PolicyRule) -> tuple[int, str]:
    # implicit rules (no code) first, then by code
    return (0 if rule.code is None else 1, rule.code or "")


def evaluate(
    rules: Iterable[PolicyRule],
    action: str,
    resource: str,
    context: Mapping[str, Any] | None = None,
) -> Decision:
    """
    Decide ALLOW or DENY for one request against candidate policies.

    The result does not depend on the order of ``rules``; when several
    policies of the winning effect apply, the reported one is the first
    by code.

    Args:
        rules: Candidate policies
        action: Requested action, e.g. "update"
        resource: Requested resource, e.g. "members"
        context: Request attributes used by conditions

    Returns:
        Decision with the effect and a human-readable reason
    """
    applicable = sorted(
        (rule for rule in rules if is_applicable(rule, action, resource, context)),
        key=_sort_key,
    )

    denies = [rule for rule in applicable if rule.effect == PolicyEffect.DENY]
    if denies:
        rule = denies[0]
        if rule.code is None:
            return Decision.deny(f"No policy attached to {action}:{resource}")
        return Decision.deny(f"Denied by policy '{rule.code}'", policy_code=rule.code)

    allows = [rule for rule in applicable if rule.effect == PolicyEffect.ALLOW]
    if allows:
        rule = allows[0]
        return Decision.allow(f"Allowed by policy '{rule.code}'", policy_code=rule.code)

    return Decision.deny(f"No applicable policy for {action}:{resource}")
