"""Tests for categories, comics, editions and discount codes."""

from decimal import Decimal

import pytest

from comicstore import cart, catalog, orders
from comicstore.errors import ConflictError, EditionInUseError, NotFoundError, ValidationError


class TestCategories:
    def test_duplicate_name(self, db):
        catalog.create_category(db, "Horror")
        with pytest.raises(ConflictError):
            catalog.create_category(db, "Horror")

    def test_name_required(self, db):
        with pytest.raises(ValidationError):
            catalog.create_category(db, "")

    def test_update(self, db):
        category = catalog.create_category(db, "Sci-fi")
        updated = catalog.update_category(db, category["id"], "Science fiction", "Space")
        assert updated["name"] == "Science fiction"
        assert updated["description"] == "Space"

    def test_delete_refused_while_used(self, db, comic):
        with pytest.raises(ValidationError):
            catalog.delete_category(db, comic["category_id"])

    def test_search(self, db):
        catalog.create_category(db, "Shojo")
        catalog.create_category(db, "Seinen")
        page = catalog.search_categories(db, "sho")
        assert [c["name"] for c in page.items] == ["Shojo"]


class TestComics:
    def test_get_includes_category_and_editions(self, db, comic, edition):
        found = catalog.get_comic(db, comic["id"])
        assert found["category"]["name"] == "Manga"
        assert [e["id"] for e in found["editions"]] == [edition["id"]]
        assert found["volume_count"] == 1

    def test_unknown_category(self, db):
        with pytest.raises(NotFoundError):
            catalog.create_comic(db, "Orphan", category_id=77)

    def test_search_by_author(self, db, comic):
        page = catalog.search_comics(db, "oda")
        assert page.total_count == 1

    def test_search_by_category(self, db, comic):
        other = catalog.create_category(db, "Western")
        catalog.create_comic(db, "Batman", "Bob Kane", category_id=other["id"])
        page = catalog.search_comics(db, category_id=str(other["id"]))
        assert [c["title"] for c in page.items] == ["Batman"]

    def test_delete_refused_while_editions_exist(self, db, comic, edition):
        with pytest.raises(ValidationError):
            catalog.delete_comic(db, comic["id"])

    def test_update(self, db, comic):
        updated = catalog.update_comic(db, comic["id"], title="One Piece (Color)")
        assert updated["title"] == "One Piece (Color)"
        assert updated["author"] == "Eiichiro Oda"


class TestEditions:
    def test_price_is_decimal(self, edition):
        assert edition["price"] == Decimal("10")

    @pytest.mark.parametrize("price", [0, -5, "free"])
    def test_invalid_price(self, db, comic, price):
        with pytest.raises(ValidationError):
            catalog.create_edition(db, comic["id"], "Bad", price, 100)

    def test_negative_stock(self, db, comic):
        with pytest.raises(ValidationError):
            catalog.create_edition(db, comic["id"], "Bad", "5", 100, stock_available=-1)

    @pytest.mark.parametrize("stock", ["abc", "2.5", 2.5, True])
    def test_junk_stock_on_create(self, db, comic, stock):
        with pytest.raises(ValidationError):
            catalog.create_edition(db, comic["id"], "Bad", "5", 100, stock_available=stock)

    @pytest.mark.parametrize("stock", ["abc", "2.5"])
    def test_junk_stock_on_update(self, db, edition, stock):
        with pytest.raises(ValidationError):
            catalog.update_edition(db, edition["id"], stock_available=stock)
        with pytest.raises(ValidationError):
            catalog.update_edition(db, edition["id"], stock_sold=stock)
        assert catalog.get_edition(db, edition["id"])["stock_available"] == 5

    def test_numeric_string_stock(self, db, comic):
        created = catalog.create_edition(db, comic["id"], "Ok", "5", 100, stock_available=" 7 ")
        assert created["stock_available"] == 7

    def test_unknown_comic(self, db):
        with pytest.raises(NotFoundError):
            catalog.create_edition(db, 99, "Lost", "5", 100)

    def test_update_unreferenced(self, db, edition):
        updated = catalog.update_edition(db, edition["id"], price="12.50", stock_available=8)
        assert updated["price"] == Decimal("12.50")
        assert updated["stock_available"] == 8

    def test_update_locked_by_cart(self, db, alice, edition):
        cart.add_to_cart(db, alice, edition["id"], 1)
        with pytest.raises(EditionInUseError):
            catalog.update_edition(db, edition["id"], name="Renamed")

    def test_delete_locked_by_order(self, db, alice, edition):
        orders.create_order(db, alice, edition["id"], 1)
        with pytest.raises(EditionInUseError):
            catalog.delete_edition(db, edition["id"])

    def test_delete_syncs_volume_count(self, db, comic, edition):
        catalog.delete_edition(db, edition["id"])
        assert catalog.get_comic(db, comic["id"])["volume_count"] == 0

    def test_move_to_other_comic_syncs_both(self, db, comic, edition):
        other = catalog.create_comic(db, "Naruto")
        catalog.update_edition(db, edition["id"], comic_id=other["id"])
        assert catalog.get_comic(db, comic["id"])["volume_count"] == 0
        assert catalog.get_comic(db, other["id"])["volume_count"] == 1

    def test_list_by_comic(self, db, comic, edition):
        catalog.create_edition(db, comic["id"], "Volume 2", "11", 190)
        page = catalog.list_editions_by_comic(db, comic["id"])
        assert [e["name"] for e in page.items] == ["Volume 1", "Volume 2"]


class TestDiscountCodes:
    def test_create_and_list(self, db):
        catalog.create_discount_code(db, "WELCOME", 15)
        assert [c["code"] for c in catalog.list_discount_codes(db)] == ["WELCOME"]

    def test_duplicate(self, db):
        catalog.create_discount_code(db, "WELCOME", 15)
        with pytest.raises(ConflictError):
            catalog.create_discount_code(db, "WELCOME", 5)

    @pytest.mark.parametrize("percent", [-1, 101])
    def test_percent_range(self, db, percent):
        with pytest.raises(ValidationError):
            catalog.create_discount_code(db, "BAD", percent)
