import unittest
import uuid
from decimal import Decimal

from apps.catalog.commands import (
    CreateCategoryCommand,
    CreateProductCommand,
    UpdateCategoryCommand,
    UpdateProductCommand,
)
from apps.catalog.services import CategoryService, ProductService
from apps.common.errors import (
    CategoryDeleteNotAllowedError,
    CategoryNotFoundError,
    DuplicateCategoryNameError,
    PaginationOutOfRangeError,
    ProductNotFoundError,
    ValidationFailedError,
)


class FakeRepository:
    """In-memory repository evaluating specifications with ``is_satisfied_by``."""

    def __init__(self):
        self.rows = {}

    def _hydrate(self, entity, includes):
        return entity

    def get_all(self, *includes):
        return [self._hydrate(e, includes) for e in self.rows.values()]

    def get_by_id(self, pk, *includes):
        entity = self.rows.get(pk)
        return self._hydrate(entity, includes) if entity is not None else None

    def exists(self, pk):
        return pk in self.rows

    def find(self, spec, *includes):
        return [
            self._hydrate(e, includes) for e in self.rows.values() if spec.is_satisfied_by(e)
        ]

    def first_or_default(self, spec, *includes):
        matches = self.find(spec, *includes)
        return matches[0] if matches else None

    def count(self, spec=None):
        if spec is None:
            return len(self.rows)
        return len(self.find(spec))

    def get_paged(self, page, page_size, spec=None, *includes):
        items = self.find(spec, *includes) if spec is not None else self.get_all(*includes)
        offset = (page - 1) * page_size
        return items[offset:offset + page_size]

    def create(self, entity):
        self.rows[entity.pk] = entity
        return entity

    def update(self, entity):
        self.rows[entity.pk] = entity
        return entity

    def delete(self, pk):
        return self.rows.pop(pk, None) is not None


class FakeCategoryRepository(FakeRepository):
    pass


class FakeProductRepository(FakeRepository):
    def __init__(self, categories):
        super().__init__()
        self.categories = categories

    def _hydrate(self, entity, includes):
        if "category" in includes:
            entity.category = self.categories.rows[entity.category_id]
        return entity


def build_services():
    categories = FakeCategoryRepository()
    products = FakeProductRepository(categories)
    return (
        CategoryService(categories, products),
        ProductService(products, categories),
        categories,
        products,
    )


class CategoryServiceTests(unittest.TestCase):
    def setUp(self):
        self.service, self.product_service, self.categories, self.products = build_services()

    def _add_product(self, category_id, name="Widget", price="10.00"):
        return self.product_service.create_product(
            {"name": name, "price": price, "category_id": category_id}
        )

    def test_create_category_assigns_id_and_equal_timestamps(self):
        dto = self.service.create_category({"name": "Books", "description": "Reading"})
        self.assertIsInstance(dto.id, uuid.UUID)
        self.assertEqual(dto.name, "Books")
        self.assertEqual(dto.description, "Reading")
        self.assertEqual(dto.created_at, dto.updated_at)
        self.assertTrue(self.categories.exists(dto.id))

    def test_create_category_defaults_missing_description_to_empty(self):
        dto = self.service.create_category(CreateCategoryCommand(name="Garden"))
        self.assertEqual(dto.description, "")

    def test_create_category_requires_name(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.create_category({"name": "   "})
        self.assertEqual(ctx.exception.errors, ["name: Category name is required"])
        self.assertEqual(self.categories.count(), 0)

    def test_create_category_reports_every_field_error(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.create_category({"name": "x" * 101, "description": "d" * 501})
        self.assertEqual(
            ctx.exception.errors,
            [
                "name: Category name cannot exceed 100 characters",
                "description: Category description cannot exceed 500 characters",
            ],
        )

    def test_create_category_accepts_boundary_lengths(self):
        dto = self.service.create_category({"name": "x" * 100, "description": "d" * 500})
        self.assertEqual(len(dto.name), 100)

    def test_create_category_duplicate_name_conflicts(self):
        self.service.create_category({"name": "Books"})
        with self.assertRaises(DuplicateCategoryNameError) as ctx:
            self.service.create_category({"name": "Books"})
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.code, "CATEGORY_DUPLICATE_NAME")
        self.assertEqual(self.categories.count(), 1)

    def test_category_names_differ_by_case(self):
        self.service.create_category({"name": "Books"})
        lower = self.service.create_category({"name": "books"})
        self.assertEqual(lower.name, "books")
        self.assertEqual(self.categories.count(), 2)
        with self.assertRaises(CategoryNotFoundError):
            self.service.get_category_by_name("BOOKS")

    def test_get_category_missing_raises_not_found(self):
        missing = uuid.uuid4()
        with self.assertRaises(CategoryNotFoundError) as ctx:
            self.service.get_category(missing)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.extensions()["key"], str(missing))

    def test_update_category_advances_updated_at(self):
        created = self.service.create_category({"name": "Books", "description": "Old"})
        updated = self.service.update_category(
            {"id": created.id, "name": "Novels", "description": "New"}
        )
        self.assertEqual(updated.id, created.id)
        self.assertEqual(updated.name, "Novels")
        self.assertEqual(updated.description, "New")
        self.assertEqual(updated.created_at, created.created_at)
        self.assertGreater(updated.updated_at, created.updated_at)

    def test_update_category_may_keep_its_own_name(self):
        created = self.service.create_category({"name": "Books"})
        updated = self.service.update_category(
            UpdateCategoryCommand(id=created.id, name="Books", description="Same name")
        )
        self.assertEqual(updated.description, "Same name")

    def test_update_category_rename_to_existing_name_conflicts(self):
        self.service.create_category({"name": "Books"})
        other = self.service.create_category({"name": "Music"})
        with self.assertRaises(DuplicateCategoryNameError):
            self.service.update_category({"id": other.id, "name": "Books"})

    def test_update_category_missing_target_raises_not_found(self):
        with self.assertRaises(CategoryNotFoundError):
            self.service.update_category({"id": uuid.uuid4(), "name": "Books"})

    def test_update_category_validates_fields(self):
        created = self.service.create_category({"name": "Books"})
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.update_category({"id": created.id, "name": ""})
        self.assertEqual(ctx.exception.errors, ["name: Category name is required"])

    def test_delete_category_with_products_is_blocked(self):
        category = self.service.create_category({"name": "Books"})
        self._add_product(category.id, "Novel")
        self._add_product(category.id, "Poems")
        with self.assertRaises(CategoryDeleteNotAllowedError) as ctx:
            self.service.delete_category(category.id)
        self.assertEqual(ctx.exception.product_count, 2)
        self.assertEqual(ctx.exception.extensions()["productCount"], 2)
        self.assertTrue(self.categories.exists(category.id))

    def test_delete_empty_category(self):
        category = self.service.create_category({"name": "Books"})
        self.assertTrue(self.service.delete_category(category.id))
        self.assertFalse(self.service.category_exists(category.id))

    def test_delete_missing_category_raises_not_found(self):
        with self.assertRaises(CategoryNotFoundError):
            self.service.delete_category(uuid.uuid4())

    def test_can_delete_category(self):
        empty = self.service.create_category({"name": "Empty"})
        full = self.service.create_category({"name": "Full"})
        self._add_product(full.id)
        self.assertTrue(self.service.can_delete_category(empty.id))
        self.assertFalse(self.service.can_delete_category(full.id))

    def test_get_category_details_lists_products(self):
        category = self.service.create_category({"name": "Books"})
        self._add_product(category.id, "Novel", "19.99")
        details = self.service.get_category_details(category.id)
        self.assertEqual(details.name, "Books")
        self.assertEqual(len(details.products), 1)
        self.assertEqual(details.products[0].name, "Novel")
        self.assertEqual(details.products[0].category_name, "Books")

    def test_get_category_by_name(self):
        created = self.service.create_category({"name": "Books"})
        self.assertEqual(self.service.get_category_by_name("Books").id, created.id)
        with self.assertRaises(CategoryNotFoundError):
            self.service.get_category_by_name("Music")
        with self.assertRaises(ValidationFailedError):
            self.service.get_category_by_name(" ")

    def test_search_categories_matches_name_or_description(self):
        self.service.create_category({"name": "Books", "description": "Paper"})
        self.service.create_category({"name": "Music", "description": "Vinyl and books"})
        self.service.create_category({"name": "Garden"})
        names = [c.name for c in self.service.search_categories("ook")]
        self.assertEqual(names, ["Books", "Music"])

    def test_search_categories_is_case_sensitive(self):
        self.service.create_category({"name": "Books"})
        self.service.create_category({"name": "Music", "description": "books"})
        self.assertEqual([c.name for c in self.service.search_categories("books")], ["Music"])
        self.assertEqual([c.name for c in self.service.search_categories("Books")], ["Books"])

    def test_blank_search_returns_all_categories(self):
        self.service.create_category({"name": "Books"})
        self.service.create_category({"name": "Music"})
        self.assertEqual(len(self.service.search_categories("")), 2)
        self.assertEqual(len(self.service.search_categories(None)), 2)

    def test_categories_with_products_and_counts(self):
        books = self.service.create_category({"name": "Books"})
        self.service.create_category({"name": "Empty"})
        self._add_product(books.id)
        with_products = self.service.list_categories_with_products()
        self.assertEqual([c.name for c in with_products], ["Books"])
        counts = {s.name: s.product_count for s in self.service.list_categories_with_product_count()}
        self.assertEqual(counts, {"Books": 1, "Empty": 0})

    def test_top_categories_orders_by_product_count(self):
        small = self.service.create_category({"name": "Small"})
        big = self.service.create_category({"name": "Big"})
        self.service.create_category({"name": "None"})
        self._add_product(small.id, "A")
        for name in ("B", "C", "D"):
            self._add_product(big.id, name)
        top = self.service.top_categories(2)
        self.assertEqual([c.name for c in top], ["Big", "Small"])

    def test_top_categories_rejects_non_positive_count(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.top_categories(0)
        self.assertEqual(ctx.exception.errors, ["count: Count must be greater than 0"])

    def test_paged_categories(self):
        for name in ("A", "B", "C"):
            self.service.create_category({"name": name})
        page = self.service.get_categories_paged(2, 2)
        self.assertEqual([c.name for c in page.items], ["C"])
        self.assertEqual(page.total_count, 3)
        self.assertEqual(page.total_pages, 2)
        self.assertTrue(page.has_previous_page)
        self.assertFalse(page.has_next_page)

    def test_paged_categories_out_of_range(self):
        self.service.create_category({"name": "A"})
        with self.assertRaises(PaginationOutOfRangeError) as ctx:
            self.service.get_categories_paged(3, 1)
        self.assertEqual(ctx.exception.extensions(), {"requestedPage": 3, "totalPages": 1})

    def test_paged_categories_empty_store_returns_empty_page(self):
        page = self.service.get_categories_paged(5, 10)
        self.assertEqual(page.items, [])
        self.assertEqual(page.total_pages, 0)

    def test_paged_categories_rejects_non_positive_arguments(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.get_categories_paged(0, 0)
        self.assertEqual(
            ctx.exception.errors,
            ["page: Page must be greater than 0", "pageSize: Page size must be greater than 0"],
        )

    def test_count_categories(self):
        self.service.create_category({"name": "A"})
        self.assertEqual(self.service.count_categories(), 1)

    def test_validate_category_lists_duplicate_as_field_error(self):
        self.service.create_category({"name": "Books"})
        result = self.service.validate_category(CreateCategoryCommand(name="Books"))
        self.assertFalse(result.is_valid)
        self.assertEqual([str(e) for e in result.errors], ["name: Category name already exists"])

    def test_validate_category_update_reports_missing_target(self):
        result = self.service.validate_category_update(
            UpdateCategoryCommand(id=uuid.uuid4(), name="Books")
        )
        self.assertFalse(result.is_valid)
        self.assertEqual([e.field for e in result.errors], ["id"])


class ProductServiceTests(unittest.TestCase):
    def setUp(self):
        self.category_service, self.service, self.categories, self.products = build_services()
        self.books = self.category_service.create_category({"name": "Books"})

    def _create(self, name="Novel", price="19.99", description="", category_id=None):
        return self.service.create_product(
            CreateProductCommand(
                name=name,
                price=Decimal(price),
                category_id=category_id or self.books.id,
                description=description,
            )
        )

    def test_create_product_carries_category_name(self):
        dto = self._create(description="A story")
        self.assertEqual(dto.name, "Novel")
        self.assertEqual(dto.price, Decimal("19.99"))
        self.assertEqual(dto.category_id, self.books.id)
        self.assertEqual(dto.category_name, "Books")
        self.assertEqual(dto.created_at, dto.updated_at)

    def test_create_product_accepts_camel_case_category_key(self):
        dto = self.service.create_product(
            {"name": "Novel", "price": "5", "categoryId": str(self.books.id)}
        )
        self.assertEqual(dto.category_id, self.books.id)

    def test_create_product_collects_field_errors(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.create_product(
                {"name": "", "price": "0", "category_id": uuid.uuid4()}
            )
        self.assertEqual(
            ctx.exception.errors,
            [
                "name: Product name is required",
                "price: Product price must be greater than 0",
                "categoryId: Category does not exist",
            ],
        )
        self.assertEqual(self.products.count(), 0)

    def test_create_product_rejects_long_fields(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(name="n" * 101, description="d" * 1001)
        self.assertEqual(
            [e.field for e in ctx.exception.field_errors], ["name", "description"]
        )

    def test_create_product_rejects_sub_cent_price(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.create_product(
                {"name": "Novel", "price": "0.001", "category_id": self.books.id}
            )
        self.assertEqual(
            ctx.exception.errors, ["price: Product price cannot have more than 2 decimal places"]
        )
        self.assertEqual(self.products.count(), 0)

    def test_create_product_rejects_non_finite_price(self):
        for raw in ("NaN", "Infinity", Decimal("NaN")):
            with self.subTest(price=raw):
                with self.assertRaises(ValidationFailedError) as ctx:
                    self.service.create_product(
                        {"name": "Novel", "price": raw, "category_id": self.books.id}
                    )
                self.assertEqual(
                    ctx.exception.errors, ["price: Product price must be greater than 0"]
                )
        self.assertEqual(self.products.count(), 0)

    def test_create_product_price_validation_on_command(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(price="NaN")
        self.assertEqual(ctx.exception.errors, ["price: Product price must be greater than 0"])
        with self.assertRaises(ValidationFailedError) as ctx:
            self._create(price="1e16")
        self.assertEqual(
            ctx.exception.errors, ["price: Product price must be less than 10000000000000000"]
        )
        dto = self._create(price="12.500")
        self.assertEqual(dto.price, Decimal("12.5"))

    def test_get_product_details_includes_category(self):
        created = self._create()
        details = self.service.get_product_details(created.id)
        self.assertEqual(details.category.id, self.books.id)
        self.assertEqual(details.category.name, "Books")

    def test_get_missing_product_raises_not_found(self):
        with self.assertRaises(ProductNotFoundError):
            self.service.get_product(uuid.uuid4())

    def test_update_product_moves_category_and_timestamp(self):
        music = self.category_service.create_category({"name": "Music"})
        created = self._create()
        updated = self.service.update_product(
            UpdateProductCommand(
                id=created.id,
                name="Album",
                price=Decimal("9.99"),
                category_id=music.id,
                description="LP",
            )
        )
        self.assertEqual(updated.name, "Album")
        self.assertEqual(updated.category_id, music.id)
        self.assertEqual(updated.category_name, "Music")
        self.assertEqual(updated.created_at, created.created_at)
        self.assertGreater(updated.updated_at, created.updated_at)

    def test_update_missing_product_raises_not_found(self):
        with self.assertRaises(ProductNotFoundError):
            self.service.update_product(
                {"id": uuid.uuid4(), "name": "X", "price": "1", "category_id": self.books.id}
            )

    def test_update_product_validates_fields(self):
        created = self._create()
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.update_product(
                {"id": created.id, "name": "X", "price": "-1", "category_id": self.books.id}
            )
        self.assertEqual(ctx.exception.errors, ["price: Product price must be greater than 0"])

    def test_delete_product(self):
        created = self._create()
        self.assertTrue(self.service.delete_product(created.id))
        self.assertFalse(self.service.product_exists(created.id))
        with self.assertRaises(ProductNotFoundError):
            self.service.delete_product(created.id)

    def test_products_by_category_and_count(self):
        music = self.category_service.create_category({"name": "Music"})
        self._create("Novel")
        self._create("Album", category_id=music.id)
        listed = self.service.list_products_by_category(music.id)
        self.assertEqual([p.name for p in listed], ["Album"])
        self.assertEqual(self.service.count_products_by_category(self.books.id), 1)
        self.assertEqual(self.service.count_products_by_category(uuid.uuid4()), 0)

    def test_price_range_is_inclusive(self):
        self._create("Cheap", "5.00")
        self._create("Mid", "10.00")
        self._create("Dear", "20.00")
        names = [p.name for p in self.service.list_products_by_price_range(Decimal("5"), Decimal("10"))]
        self.assertEqual(names, ["Cheap", "Mid"])

    def test_price_range_rejects_inverted_bounds(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            self.service.list_products_by_price_range(Decimal("10"), Decimal("5"))
        self.assertEqual(ctx.exception.field_errors[0].field, "minPrice")

    def test_search_products(self):
        self._create("Novel", description="Long story")
        self._create("Atlas", description="Maps")
        self.assertEqual([p.name for p in self.service.search_products("story")], ["Novel"])
        self.assertEqual(len(self.service.search_products("  ")), 2)

    def test_paged_products(self):
        for name in ("A", "B", "C"):
            self._create(name)
        page = self.service.get_products_paged(1, 2)
        self.assertEqual([p.name for p in page.items], ["A", "B"])
        self.assertEqual(page.total_pages, 2)
        self.assertTrue(page.has_next_page)
        self.assertEqual(page.items[0].category_name, "Books")

    def test_paged_products_out_of_range(self):
        for name in ("A", "B", "C"):
            self._create(name)
        with self.assertRaises(PaginationOutOfRangeError) as ctx:
            self.service.get_products_paged(5, 10)
        self.assertEqual(ctx.exception.total_pages, 1)

    def test_count_products(self):
        self._create()
        self.assertEqual(self.service.count_products(), 1)

    def test_validate_product_update_reports_missing_target(self):
        result = self.service.validate_product_update(
            UpdateProductCommand(
                id=None, name="X", price=Decimal("1"), category_id=self.books.id
            )
        )
        self.assertFalse(result.is_valid)
        self.assertEqual([str(e) for e in result.errors], ["id: Product does not exist"])

    def test_validate_product_is_valid(self):
        result = self.service.validate_product(
            CreateProductCommand(name="X", price=Decimal("1"), category_id=self.books.id)
        )
        self.assertTrue(result.is_valid)
        self.assertEqual(result.errors, [])


