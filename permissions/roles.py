# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_CUSTOMER = "customer"
ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"

STAFF_ROLES = {
    ROLE_STAFF,
    ROLE_ADMIN,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_CATALOG_MANAGE = "catalog.manage"

CAP_ORDERS_VIEW = "orders.view"
CAP_ORDERS_MANAGE = "orders.manage"
CAP_ORDERS_REFUND = "orders.refund"

CAP_INVOICES_MANAGE = "invoices.manage"

CAP_DELIVERIES_MANAGE = "deliveries.manage"
CAP_DELIVERIES_ASSIGN = "deliveries.assign"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"  # manual overrides of the stock level

CAP_WASTE_LOG = "waste.log"
CAP_WASTE_APPROVE = "waste.approve"

CAP_PROMOTIONS_MANAGE = "promotions.manage"
CAP_USERS_MANAGE = "users.manage"
CAP_REPORTS_VIEW = "reports.view"
CAP_SETTINGS_MANAGE = "settings.manage"
CAP_TICKETS_MANAGE = "tickets.manage"

ALL_CAPABILITIES = {
    CAP_CATALOG_MANAGE,
    CAP_ORDERS_VIEW,
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_REFUND,
    CAP_INVOICES_MANAGE,
    CAP_DELIVERIES_MANAGE,
    CAP_DELIVERIES_ASSIGN,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_WASTE_LOG,
    CAP_WASTE_APPROVE,
    CAP_PROMOTIONS_MANAGE,
    CAP_USERS_MANAGE,
    CAP_REPORTS_VIEW,
    CAP_SETTINGS_MANAGE,
    CAP_TICKETS_MANAGE,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_STAFF: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_MANAGE,
        CAP_DELIVERIES_MANAGE,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_WASTE_LOG,
        # receiving stock is routine; overriding the level is not
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_ORDERS_REFUND
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default: a view that forgot to declare is closed
            return False

        return required in effective_capabilities_for(user)


# =========================================================
# Role Permissions
# =========================================================
class IsCustomer(BaseRolePermission):
    """Customer-only surfaces such as support tickets."""

    allowed_roles = {ROLE_CUSTOMER}
