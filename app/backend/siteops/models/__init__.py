"""ORM model package."""

from siteops.models.entities import (
    Assignment,
    Employee,
    Equipment,
    Expense,
    Inventory,
    Material,
    Notification,
    Project,
    PurchaseOrder,
    PurchaseRequest,
    PurchaseRequestItem,
    Role,
    Supplier,
    Timesheet,
    User,
)

__all__ = [
    "Assignment",
    "Employee",
    "Equipment",
    "Expense",
    "Inventory",
    "Material",
    "Notification",
    "Project",
    "PurchaseOrder",
    "PurchaseRequest",
    "PurchaseRequestItem",
    "Role",
    "Supplier",
    "Timesheet",
    "User",
]
