"""
Authorization rules for user management.
"""
from recordhub.features.permissions.gate import Ability, Rule, gate
from recordhub.features.permissions.registry import USERS_MANAGE, USERS_VIEW
from recordhub.features.users.models import User

RESOURCE_TYPE = "users"

gate.register(
    RESOURCE_TYPE,
    {
        "view_any": Rule((Ability(USERS_VIEW),), "You do not have permission to view users."),
        "manage": Rule((Ability(USERS_MANAGE),), "You do not have permission to manage users."),
    },
    model=User,
)
