# tenants/apps.py

"""
TENANTS APP CONFIG

Company (tenant) master data and the single tenant resolver used by every
tenant-scoped endpoint.
"""

from django.apps import AppConfig


class TenantsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tenants"
    verbose_name = "Tenants"
