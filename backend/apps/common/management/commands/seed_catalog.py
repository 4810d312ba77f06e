from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.catalog.models import Category, Product

CATEGORIES = [
    ("Electronics", "Phones, laptops and everything with a battery"),
    ("Books", "Printed and digital reading"),
    ("Clothing", "Apparel for men and women"),
    ("Jewelry", "Rings, chains and bracelets"),
    ("Garden", ""),
]

PRODUCTS = [
    ("Laptop Pro 14", "1299.00", "14 inch laptop with 16GB RAM", "Electronics"),
    ("Noise Cancelling Headphones", "249.99", "Over-ear, 30 hour battery", "Electronics"),
    ("USB-C Charger 65W", "39.90", "", "Electronics"),
    ("The Pragmatic Novel", "19.99", "A story about shipping software", "Books"),
    ("Cooking Basics", "24.50", "Recipes for every day", "Books"),
    ("Cotton Jacket", "55.99", "Outerwear for spring and autumn", "Clothing"),
    ("Slim Fit T-Shirt", "22.30", "Contrast raglan long sleeve", "Clothing"),
    ("Silver Dragon Bracelet", "695.00", "Gold and silver station chain", "Jewelry"),
]


def _stamped(**fields):
    now = timezone.now()
    return {**fields, "created_at": now, "updated_at": now}


class Command(BaseCommand):
    help = "Seed demo categories and products. Safe to run repeatedly."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset", action="store_true", help="Delete existing catalog data before seeding"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            self.stdout.write("Deleting existing catalog data...")
            # Products first: the category foreign key is protected.
            Product.objects.all().delete()
            Category.objects.all().delete()

        self.stdout.write("Seeding categories...")
        by_name = {}
        created_categories = 0
        for name, description in CATEGORIES:
            category, created = Category.objects.get_or_create(
                name=name, defaults=_stamped(description=description)
            )
            by_name[name] = category
            created_categories += int(created)

        self.stdout.write("Seeding products...")
        created_products = 0
        for name, price, description, category_name in PRODUCTS:
            _, created = Product.objects.get_or_create(
                name=name,
                category=by_name[category_name],
                defaults=_stamped(price=Decimal(price), description=description),
            )
            created_products += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Catalog seed completed ({created_categories} categories, "
                f"{created_products} products created)."
            )
        )
