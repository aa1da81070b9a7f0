# tenants/services/resolver.py

"""
TENANT RESOLVER

Purpose:
- Single place that maps an authenticated user to the owning company.
- Views call it once per request (TenantScopedMixin) and pass the company
  explicitly into every service; services never guess the tenant.
"""

from __future__ import annotations

import logging

from backend.errors import NotFoundError
from tenants.models import Company

logger = logging.getLogger(__name__)


def resolve_company(user) -> Company:
    if user is None or not getattr(user, "is_authenticated", False):
        raise NotFoundError("Company not found")

    company = getattr(user, "company", None)
    if company is None or not company.is_active:
        logger.warning("user has no active company", extra={"user_id": str(user.pk)})
        raise NotFoundError("Company not found")

    return company
