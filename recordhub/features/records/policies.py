"""
Authorization rules for records.

The ``*_own`` permissions only apply to records the user created.
"""
from recordhub.features.permissions.gate import Ability, Rule, Scope, gate
from recordhub.features.permissions.registry import (
    RECORDS_CREATE,
    RECORDS_DELETE,
    RECORDS_DELETE_OWN,
    RECORDS_UPDATE,
    RECORDS_UPDATE_OWN,
    RECORDS_VIEW,
    RECORDS_VIEW_ALL,
)
from recordhub.features.records.models import Record

RESOURCE_TYPE = "records"


def record_owner(record: Record) -> str:
    return record.created_by


gate.register(
    RESOURCE_TYPE,
    {
        "view_any": Rule(
            (Ability(RECORDS_VIEW),),
            "You do not have permission to view records.",
        ),
        "view": Rule(
            (Ability(RECORDS_VIEW_ALL), Ability(RECORDS_VIEW, Scope.OWN)),
            "You do not have permission to view this record.",
        ),
        "create": Rule(
            (Ability(RECORDS_CREATE),),
            "You do not have permission to create records.",
        ),
        "update": Rule(
            (Ability(RECORDS_UPDATE), Ability(RECORDS_UPDATE_OWN, Scope.OWN)),
            "You do not have permission to update this record.",
        ),
        "delete": Rule(
            (Ability(RECORDS_DELETE), Ability(RECORDS_DELETE_OWN, Scope.OWN)),
            "You do not have permission to delete this record.",
        ),
    },
    model=Record,
    owner_of=record_owner,
)
