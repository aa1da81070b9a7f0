# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# Roles describe what a company member does, never which company they
# belong to (that is user.company).
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_STOREKEEPER = "storekeeper"
ROLE_SALES = "sales"
ROLE_ACCOUNTANT = "accountant"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_STOREKEEPER,
    ROLE_SALES,
    ROLE_ACCOUNTANT,
}

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_STOREKEEPER, "Storekeeper"),
    (ROLE_SALES, "Sales"),
    (ROLE_ACCOUNTANT, "Accountant"),
]


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"     # sensitive manual adjustments

CAP_TRANSFERS_REQUEST = "transfers.request"
CAP_TRANSFERS_APPROVE = "transfers.approve"

CAP_SALES_ORDER = "sales.order"
CAP_SALES_APPROVE = "sales.approve"
CAP_INVOICES_MANAGE = "invoices.manage"
CAP_PAYMENTS_RECORD = "payments.record"

CAP_PURCHASES_ORDER = "purchases.order"
CAP_PURCHASES_APPROVE = "purchases.approve"

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_TRANSFERS_REQUEST,
    CAP_TRANSFERS_APPROVE,
    CAP_SALES_ORDER,
    CAP_SALES_APPROVE,
    CAP_INVOICES_MANAGE,
    CAP_PAYMENTS_RECORD,
    CAP_PURCHASES_ORDER,
    CAP_PURCHASES_APPROVE,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_TRANSFERS_REQUEST,
        CAP_TRANSFERS_APPROVE,
        CAP_SALES_ORDER,
        CAP_SALES_APPROVE,
        CAP_INVOICES_MANAGE,
        CAP_PURCHASES_ORDER,
        CAP_PURCHASES_APPROVE,
        CAP_REPORTS_VIEW,
    },
    ROLE_STOREKEEPER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_TRANSFERS_REQUEST,
        CAP_PURCHASES_ORDER,
    },
    ROLE_SALES: {
        CAP_INVENTORY_VIEW,
        CAP_SALES_ORDER,
        CAP_INVOICES_MANAGE,
    },
    ROLE_ACCOUNTANT: {
        CAP_INVENTORY_VIEW,
        CAP_INVOICES_MANAGE,
        CAP_PAYMENTS_RECORD,
        CAP_REPORTS_VIEW,
    },
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
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_INVENTORY_ADJUST
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_REPORTS_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(user)
        return any(cap in caps for cap in set(required))


class BaseRolePermission(BasePermission):
    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_user_role(user) in self.allowed_roles


class IsCompanyAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}
