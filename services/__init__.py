"""
Services module - Business logic layer for Load Builder.
"""
from services.audit_service import AuditService
from services.auth_service import AuthService
from services.inventory_service import InventoryService
from services.load_service import LoadService
from services.packing_list_service import PackingListService
from services.project_service import ProjectService
from services.truck_load_service import TruckLoadService

__all__ = [
    "AuditService",
    "AuthService",
    "InventoryService",
    "LoadService",
    "PackingListService",
    "ProjectService",
    "TruckLoadService",
]
