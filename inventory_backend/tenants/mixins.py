# tenants/mixins.py

"""
TENANT-SCOPED VIEW MIXIN

Resolves the caller's company once, after authentication and permission
checks, and exposes it as `self.company` for querysets and service calls.
"""

from __future__ import annotations

from tenants.services.resolver import resolve_company


class TenantScopedMixin:
    company = None

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.company = resolve_company(request.user)
