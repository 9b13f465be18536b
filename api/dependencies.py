from typing import List
from fastapi import Depends, HTTPException, status
from models.user import User
from core.permissions import Capability, has_capability, normalize_role
from core.security import get_current_user


class CapabilityChecker:
    def __init__(self, required: List[Capability]):
        self.required = required

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        missing = [cap.value for cap in self.required if not has_capability(user, cap)]

        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Operation not permitted for role {normalize_role(user.role)}. Missing: {missing}"
            )
        return user


# Define reusable dependencies
require_admin = CapabilityChecker([Capability.MANAGE_USERS])
require_project_management = CapabilityChecker([Capability.MANAGE_PROJECTS])
require_load_management = CapabilityChecker([Capability.MANAGE_LOADS])
require_status_override = CapabilityChecker([Capability.OVERRIDE_LOAD_STATUS])
require_inventory_staging = CapabilityChecker([Capability.STAGE_INVENTORY])
require_truck_assembly = CapabilityChecker([Capability.ASSEMBLE_TRUCK_LOADS])
require_load_viewer = CapabilityChecker([Capability.VIEW_LOADS])
require_project_viewer = CapabilityChecker([Capability.VIEW_PROJECTS])
require_audit_viewer = CapabilityChecker([Capability.VIEW_AUDIT_LOG])
