# tenants/tests/helpers.py

"""
Shared fixtures for the app test suites.

Every helper writes through the same services the API uses, so fixtures
carry real ledger rows (batches, movements, serial counters).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model

from permissions.roles import ROLE_ADMIN
from products.models import Product
from products.services.catalog import create_product
from products.services.stock_intake import intake_batch
from sales.models import Customer
from tenants.models import Company
from warehouses.services.warehouses import create_warehouse

User = get_user_model()


def make_company(name: str = "Acme Trading") -> Company:
    return Company.objects.create(name=name)


def make_user(company, *, role: str = ROLE_ADMIN, email: str | None = None, **extra):
    return User.objects.create_user(
        email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        password="pass",
        role=role,
        company=company,
        **extra,
    )


def make_warehouse(company, name: str = "Main Store"):
    return create_warehouse(company=company, name=name)


def make_product(company, *, name: str = "Copper Wire", sku: str = "", opening=(), user=None) -> Product:
    """
    opening: iterable of (warehouse, quantity) pairs, one batch each.
    """
    return create_product(
        company=company,
        name=name,
        sku=sku,
        unit_price=Decimal("10.00"),
        cost_price=Decimal("6.00"),
        opening_stocks=[
            {"warehouse_id": warehouse.pk, "quantity": qty} for warehouse, qty in opening
        ],
        user=user,
    )


def add_batch(company, product, warehouse, quantity: int, *, unit_cost=Decimal("6.00")):
    return intake_batch(
        company=company,
        product=product,
        warehouse=warehouse,
        quantity=quantity,
        unit_cost=unit_cost,
    )


def make_customer(company, name: str = "Bright Retail") -> Customer:
    return Customer.objects.create(company=company, name=name)
