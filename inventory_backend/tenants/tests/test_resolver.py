# tenants/tests/test_resolver.py

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import ConflictError, InsufficientStockError, NotFoundError
from backend.exception_handler import api_exception_handler
from products.models import Product
from tenants.services.resolver import resolve_company
from tenants.tests.helpers import make_company, make_user
from users.models import User


class ResolveCompanyTests(TestCase):
    """
    GUARANTEES:
    - An authenticated member resolves to their company
    - Anonymous, company-less and deactivated-company users resolve to nothing
    """

    def setUp(self):
        self.company = make_company()

    def test_member_resolves_to_company(self):
        user = make_user(self.company)
        self.assertEqual(resolve_company(user), self.company)

    def test_anonymous_is_not_found(self):
        with self.assertRaises(NotFoundError):
            resolve_company(AnonymousUser())

    def test_user_without_company_is_not_found(self):
        with self.assertRaises(NotFoundError):
            resolve_company(User(email="floating@example.com"))

    def test_inactive_company_is_not_found(self):
        user = make_user(self.company)
        self.company.is_active = False
        self.company.save()
        user.refresh_from_db()

        with self.assertRaises(NotFoundError):
            resolve_company(user)

    def test_inactive_company_blocks_api(self):
        user = make_user(self.company)
        self.company.is_active = False
        self.company.save()

        client = APIClient()
        client.force_authenticate(User.objects.get(pk=user.pk))
        response = client.get(reverse("products:product-list"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Company not found")
        self.assertFalse(Product.objects.exists())


class ExceptionHandlerTests(SimpleTestCase):
    """
    GUARANTEES:
    - Ledger errors map to 404 / 409 / 400 with their message
    - Django validation errors map to 400
    - Anything unexpected becomes a generic 500 without leaking the message
    """

    context = {"view": None}

    def test_not_found(self):
        response = api_exception_handler(NotFoundError("Product x not found"), self.context)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"detail": "Product x not found"})

    def test_conflict(self):
        response = api_exception_handler(ConflictError("duplicate"), self.context)
        self.assertEqual(response.status_code, 409)

    def test_insufficient_stock_is_bad_request(self):
        response = api_exception_handler(InsufficientStockError("Insufficient quantity"), self.context)
        self.assertEqual(response.status_code, 400)

    def test_django_validation_error(self):
        response = api_exception_handler(
            ValidationError({"quantity": ["must be positive"]}), self.context
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], {"quantity": ["must be positive"]})

    def test_unexpected_error_is_generic_500(self):
        with self.assertLogs("backend.exception_handler", level="ERROR"):
            response = api_exception_handler(KeyError("secret internals"), self.context)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"detail": "Internal server error"})
