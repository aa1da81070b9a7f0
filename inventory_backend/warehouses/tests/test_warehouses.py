# warehouses/tests/test_warehouses.py

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import ConflictError, NotFoundError
from permissions.roles import ROLE_SALES, ROLE_STOREKEEPER
from tenants.tests.helpers import make_company, make_product, make_user, make_warehouse
from warehouses.models import Warehouse
from warehouses.services.warehouses import create_warehouse, get_warehouse, update_warehouse


class WarehouseServiceTests(TestCase):
    """
    GUARANTEES:
    - Names are unique per company, case-insensitively
    - Lookup works by id or name and never crosses tenants
    """

    def setUp(self):
        self.company = make_company()
        self.main = make_warehouse(self.company, name="Main")

    def test_duplicate_name_conflicts(self):
        with self.assertRaises(ConflictError):
            create_warehouse(company=self.company, name="  main ")

    def test_same_name_in_other_company_is_fine(self):
        other = make_company("Rival Ltd")
        self.assertEqual(create_warehouse(company=other, name="Main").name, "Main")

    def test_lookup_by_name_is_case_insensitive(self):
        self.assertEqual(get_warehouse(company=self.company, name="MAIN"), self.main)

    def test_lookup_does_not_cross_tenants(self):
        other = make_company("Rival Ltd")
        with self.assertRaises(NotFoundError):
            get_warehouse(company=other, warehouse_id=self.main.pk)

    def test_rename_to_taken_name_conflicts(self):
        branch = make_warehouse(self.company, name="Branch")
        with self.assertRaises(ConflictError):
            update_warehouse(warehouse=branch, name="Main")

        renamed = update_warehouse(warehouse=branch, name="Branch East")
        self.assertEqual(renamed.name, "Branch East")


class WarehouseApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.storekeeper = make_user(self.company, role=ROLE_STOREKEEPER)
        self.sales = make_user(self.company, role=ROLE_SALES)
        self.list_url = reverse("warehouses:warehouse-list")

    def test_storekeeper_creates_warehouse(self):
        self.client.force_authenticate(self.storekeeper)

        response = self.client.post(self.list_url, {"name": "Yard"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(Warehouse.objects.filter(company=self.company, name="Yard").exists())

    def test_duplicate_returns_409(self):
        make_warehouse(self.company, name="Yard")
        self.client.force_authenticate(self.storekeeper)

        response = self.client.post(self.list_url, {"name": "yard"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_sales_can_list_but_not_create(self):
        make_warehouse(self.company)
        self.client.force_authenticate(self.sales)

        self.assertEqual(self.client.get(self.list_url).data["count"], 1)
        response = self.client.post(self.list_url, {"name": "Nope"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_delete_warehouse_with_batches(self):
        warehouse = make_warehouse(self.company)
        make_product(self.company, opening=[(warehouse, 1)])
        self.client.force_authenticate(self.storekeeper)

        response = self.client.delete(reverse("warehouses:warehouse-detail", args=[warehouse.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Warehouse.objects.filter(pk=warehouse.pk).exists())
