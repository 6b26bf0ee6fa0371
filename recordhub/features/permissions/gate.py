"""
Authorization engine.

``authorize(user, action, resource)`` returns a ``Decision`` value; it never
raises for a denial. Evaluation order:

1. Superadmin bypass: a user whose role slug is ``webadmin`` is allowed
   every action on every resource, including actions with no rule.
2. The rule registered for ``(resource_type, action)``. A rule lists
   abilities; each ability names a permission and a scope. ``Scope.ANY``
   needs only the permission, ``Scope.OWN`` also needs the resource to be an
   instance owned by the user. Any satisfied ability allows.
3. No rule: deny.

The engine loads nothing: per-instance actions expect the caller to pass the
already-fetched instance.
"""
import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from recordhub.features.permissions import registry
from recordhub.utils import get_logger


log = get_logger(__name__)

NO_RULE_REASON = "no rule defined"


class Scope(enum.Enum):
    ANY = "any"
    OWN = "own"


@dataclass(frozen=True)
class Ability:
    """A permission and the scope it grants."""
    permission: str
    scope: Scope = Scope.ANY


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class Rule:
    abilities: tuple[Ability, ...]
    deny_reason: str


@dataclass(frozen=True)
class ResourcePolicy:
    """Rules for one resource type, keyed by action."""
    resource_type: str
    rules: dict[str, Rule]
    owner_of: Callable[[Any], Any] | None = None


class Gate:
    """Registry of resource policies and the dispatch over them."""

    def __init__(self):
        self._policies: dict[str, ResourcePolicy] = {}
        self._types: dict[type, str] = {}

    def register(
        self,
        resource_type: str,
        rules: dict[str, Rule],
        model: type | None = None,
        owner_of: Callable[[Any], Any] | None = None,
    ) -> None:
        """
        Register the rules for a resource type.

        Args:
            resource_type: Name used to dispatch (e.g. "records")
            rules: action -> Rule
            model: Model class whose instances (or the class itself) map to this type
            owner_of: Returns the owning user id of an instance; required for OWN abilities

        Raises:
            UnknownPermissionError: if a rule references a permission outside the catalog
            ValueError: if a rule uses Scope.OWN without ``owner_of``
        """
        for rule in rules.values():
            registry.collect_permission_keys(ability.permission for ability in rule.abilities)
            if owner_of is None and any(ability.scope is Scope.OWN for ability in rule.abilities):
                raise ValueError(f"Resource {resource_type!r} uses owner-scoped abilities without owner_of")

        self._policies[resource_type] = ResourcePolicy(resource_type, dict(rules), owner_of)
        if model is not None:
            self._types[model] = resource_type

    def resource_type_of(self, resource: Any) -> str | None:
        if isinstance(resource, str):
            return resource
        model = resource if isinstance(resource, type) else type(resource)
        for cls in model.__mro__:
            if cls in self._types:
                return self._types[cls]
        return None

    def authorize(self, user: Any, action: str, resource: Any) -> Decision:
        """
        Decide whether ``user`` may perform ``action`` on ``resource``.

        Args:
            user: Principal exposing is_superadmin(), has_permission() and id
            action: Action name (e.g. "view_any", "update")
            resource: Model instance, model class, or resource type name
        """
        if user.is_superadmin():
            return Decision.allow()

        resource_type = self.resource_type_of(resource)
        policy = self._policies.get(resource_type) if resource_type else None
        rule = policy.rules.get(action) if policy else None
        if rule is None:
            log.debug("No rule for %s on %s; denying user %s", action, resource_type, user.id)
            return Decision.deny(NO_RULE_REASON)

        instance = None if isinstance(resource, (type, str)) else resource
        for ability in rule.abilities:
            if not user.has_permission(ability.permission):
                continue
            if ability.scope is Scope.ANY:
                return Decision.allow()
            if instance is not None and policy.owner_of(instance) == user.id:
                return Decision.allow()

        log.debug("User %s denied %s on %s", user.id, action, resource_type)
        return Decision.deny(rule.deny_reason)

    def allows_permission(self, user: Any, name: str) -> Decision:
        """Check a bare permission key, honoring the superadmin bypass."""
        if user.is_superadmin() or user.has_permission(name):
            return Decision.allow()
        return Decision.deny(f"Missing permission {name}.")


gate = Gate()


def authorize(user: Any, action: str, resource: Any) -> Decision:
    return gate.authorize(user, action, resource)


def allows_permission(user: Any, name: str) -> Decision:
    return gate.allows_permission(user, name)
