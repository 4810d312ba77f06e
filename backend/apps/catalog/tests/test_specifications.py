import unittest
from decimal import Decimal
from types import SimpleNamespace

from django.db.models import Q

from apps.catalog.specifications import (
    CategoryNameEquals,
    ProductInCategory,
    ProductPriceBetween,
    ProductTextContains,
)


class SpecificationCompositionTests(unittest.TestCase):
    def test_and_requires_both(self):
        spec = ProductInCategory("c1") & ProductPriceBetween(Decimal("1"), Decimal("5"))
        self.assertTrue(spec.is_satisfied_by(SimpleNamespace(category_id="c1", price="3")))
        self.assertFalse(spec.is_satisfied_by(SimpleNamespace(category_id="c2", price="3")))
        self.assertIsInstance(spec.to_q(), Q)

    def test_or_accepts_either(self):
        spec = ProductTextContains("lamp") | ProductInCategory("c9")
        candidate = SimpleNamespace(name="Desk", description=None, category_id="c9")
        self.assertTrue(spec.is_satisfied_by(candidate))

    def test_name_equals_excludes_given_id(self):
        candidate = SimpleNamespace(id=1, name="Books")
        self.assertTrue(CategoryNameEquals("Books").is_satisfied_by(candidate))
        self.assertFalse(CategoryNameEquals("Books", exclude_id=1).is_satisfied_by(candidate))

    def test_to_q_builds_lookups(self):
        self.assertEqual(ProductInCategory("c1").to_q(), Q(category_id="c1"))
        self.assertEqual(CategoryNameEquals("Books").to_q(), Q(name="Books"))
