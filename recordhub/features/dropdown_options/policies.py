"""
Authorization rules for dropdown options.
"""
from recordhub.features.dropdown_options.models import DropdownOption
from recordhub.features.permissions.gate import Ability, Rule, gate
from recordhub.features.permissions.registry import DROPDOWN_OPTIONS_MANAGE, DROPDOWN_OPTIONS_VIEW

RESOURCE_TYPE = "dropdown_options"

gate.register(
    RESOURCE_TYPE,
    {
        "view_any": Rule(
            (Ability(DROPDOWN_OPTIONS_VIEW),),
            "You do not have permission to view dropdown options.",
        ),
        "manage": Rule(
            (Ability(DROPDOWN_OPTIONS_MANAGE),),
            "You do not have permission to manage dropdown options.",
        ),
    },
    model=DropdownOption,
)
