"""
Role to capability mapping.

Routes check capabilities rather than comparing role names, so a role that
covers another (ADMIN covers everything a LOADER can do) is expressed once here.
"""
from enum import Enum
from typing import Any, FrozenSet


class Capability(str, Enum):
    MANAGE_PROJECTS = "manage_projects"
    MANAGE_USERS = "manage_users"
    MANAGE_LOADS = "manage_loads"
    OVERRIDE_LOAD_STATUS = "override_load_status"
    STAGE_INVENTORY = "stage_inventory"
    ASSEMBLE_TRUCK_LOADS = "assemble_truck_loads"
    VIEW_LOADS = "view_loads"
    VIEW_PROJECTS = "view_projects"
    VIEW_AUDIT_LOG = "view_audit_log"


VIEWER_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.VIEW_LOADS,
    Capability.VIEW_PROJECTS,
})

LOADER_CAPABILITIES: FrozenSet[Capability] = VIEWER_CAPABILITIES | frozenset({
    Capability.STAGE_INVENTORY,
    Capability.ASSEMBLE_TRUCK_LOADS,
})

ADMIN_CAPABILITIES: FrozenSet[Capability] = frozenset(Capability)

ROLE_CAPABILITIES = {
    "ADMIN": ADMIN_CAPABILITIES,
    "LOADER": LOADER_CAPABILITIES,
    "VIEWER": VIEWER_CAPABILITIES,
}

ROLES = tuple(ROLE_CAPABILITIES.keys())


def normalize_role(role: Any) -> str:
    # Handle both Enum and String roles safely
    raw = role.value if hasattr(role, "value") else role
    return str(raw or "").strip().upper()


def capabilities_for(role: Any) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(normalize_role(role), frozenset())


def has_capability(user: Any, capability: Capability) -> bool:
    return capability in capabilities_for(getattr(user, "role", None))
