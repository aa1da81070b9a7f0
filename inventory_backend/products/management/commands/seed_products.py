import random

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from products.models import Product
from products.services.catalog import create_product
from products.services.stock_intake import intake_batch
from tenants.models import Company
from warehouses.models import Warehouse
from warehouses.services.warehouses import create_warehouse

WAREHOUSES = ["Main Store", "Branch Store"]

PRODUCTS = [
    ("CW-2.5", "Copper Wire 2.5mm", "45.00", "31.50", "Cables"),
    ("PVC-20", "PVC Conduit 20mm", "6.80", "4.10", "Cables"),
    ("BRK-32", "Circuit Breaker 32A", "28.00", "19.25", "Switchgear"),
    ("LMP-LED", "LED Lamp 12W", "4.50", "2.60", "Lighting"),
    ("SCK-13", "Wall Socket 13A", "3.90", "2.20", "Accessories"),
]


class Command(BaseCommand):
    help = "Seed warehouses, products and FIFO stock batches for a company"

    def add_arguments(self, parser):
        parser.add_argument("--company", type=str, default="Demo Trading", help="Company name")
        parser.add_argument("--seed", type=int, default=None, help="Random seed for quantities")

    @transaction.atomic
    def handle(self, *args, **options):
        company = Company.objects.filter(name=options["company"]).first()
        if company is None:
            raise CommandError(f"Company '{options['company']}' not found; run seed_users first")

        rng = random.Random(options.get("seed"))
        self.stdout.write(self.style.WARNING(f"Seeding stock for {company.name}..."))

        warehouses = []
        for name in WAREHOUSES:
            warehouse = Warehouse.objects.filter(company=company, name__iexact=name).first()
            warehouses.append(warehouse or create_warehouse(company=company, name=name))

        for sku, name, price, cost, category in PRODUCTS:
            if Product.objects.filter(company=company, sku__iexact=sku).exists():
                self.stdout.write(f"exists:  {sku}")
                continue

            product = create_product(
                company=company,
                name=name,
                sku=sku,
                unit_price=price,
                cost_price=cost,
                category_name=category,
                opening_stocks=[
                    {"warehouse_id": w.pk, "quantity": rng.randint(20, 50)} for w in warehouses
                ],
            )
            # second batch in the main store so FIFO has something to walk
            intake_batch(
                company=company,
                product=product,
                warehouse=warehouses[0],
                quantity=rng.randint(10, 30),
                unit_cost=cost,
            )
            self.stdout.write(f"created: {sku} {name}")

        self.stdout.write(self.style.SUCCESS("Products and stock seeded."))
