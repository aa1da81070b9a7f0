# products/tests/test_categories.py

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import ConflictError, InvalidStateError
from permissions.roles import ROLE_SALES, ROLE_STOREKEEPER
from products.models import Category, Product
from products.services.catalog import create_product
from products.services.categories import create_category
from tenants.tests.helpers import make_company, make_user


class CategoryServiceTests(TestCase):
    """
    GUARANTEES:
    - Names are unique per company, case-insensitively
    - Creating a product with a category name reuses or creates the category
    """

    def setUp(self):
        self.company = make_company()

    def test_duplicate_name_conflicts(self):
        create_category(company=self.company, name="Cables")
        with self.assertRaises(ConflictError):
            create_category(company=self.company, name="  cables ")

    def test_blank_name_is_rejected(self):
        with self.assertRaises(InvalidStateError):
            create_category(company=self.company, name="   ")

    def test_same_name_in_another_company(self):
        create_category(company=self.company, name="Cables")
        other = create_category(company=make_company("Other Co"), name="Cables")
        self.assertEqual(other.name, "Cables")

    def test_product_reuses_existing_category(self):
        existing = create_category(company=self.company, name="Lighting")

        product = create_product(company=self.company, name="LED Lamp", category_name="LIGHTING")

        self.assertEqual(product.category, existing)
        self.assertEqual(Category.objects.filter(company=self.company).count(), 1)

    def test_product_creates_missing_category(self):
        product = create_product(company=self.company, name="Breaker", category_name="Switchgear")

        self.assertEqual(product.category.name, "Switchgear")
        self.assertEqual(product.category.company, self.company)

    def test_product_without_category(self):
        product = create_product(company=self.company, name="Tape")
        self.assertIsNone(product.category)
        self.assertFalse(Category.objects.exists())


class CategoryApiTests(TestCase):
    """
    GUARANTEES:
    - Categories are listed per company with a product count
    - Creation needs inventory.edit and conflicts on duplicates
    - A product cannot be moved into another company's category
    """

    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.storekeeper = make_user(self.company, role=ROLE_STOREKEEPER)
        self.sales = make_user(self.company, role=ROLE_SALES)
        self.list_url = reverse("products:category-list")

    def test_list_counts_products(self):
        create_product(company=self.company, name="Wire", category_name="Cables")
        create_product(company=self.company, name="Flex", category_name="cables")
        create_category(company=make_company("Other Co"), name="Hidden")

        self.client.force_authenticate(self.sales)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        row = response.data["results"][0]
        self.assertEqual((row["name"], row["product_count"]), ("Cables", 2))

    def test_create_and_duplicate(self):
        self.client.force_authenticate(self.storekeeper)

        response = self.client.post(self.list_url, {"name": "Tools"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["product_count"], 0)

        response = self.client.post(self.list_url, {"name": "tools"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_sales_role_cannot_create(self):
        self.client.force_authenticate(self.sales)
        response = self.client.post(self.list_url, {"name": "Tools"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_product_create_accepts_category_name(self):
        self.client.force_authenticate(self.storekeeper)

        response = self.client.post(
            reverse("products:product-list"),
            {"name": "Socket", "category_name": "Accessories"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["category_name"], "Accessories")

    def test_foreign_category_is_rejected_on_update(self):
        product = create_product(company=self.company, name="Socket")
        foreign = create_category(company=make_company("Other Co"), name="Foreign")

        self.client.force_authenticate(self.storekeeper)
        response = self.client.patch(
            reverse("products:product-detail", args=[product.pk]),
            {"category": str(foreign.pk)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIsNone(Product.objects.get(pk=product.pk).category)
