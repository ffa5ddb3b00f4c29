"""Tests for AuthoringSession: field coercion, attribute editing and edit mode."""

import asyncio
from decimal import Decimal

import pytest

from authoring.engine import AuthoringSession
from authoring.engine.schema import SELECT_SUBCATEGORY
from authoring.errors import SchemaError, ValidationError
from authoring.schemas import TypeTag


@pytest.fixture
def session(client, directory) -> AuthoringSession:
    return AuthoringSession(client, directory)


class TestStaticFields:
    @pytest.mark.parametrize(
        "raw, expected",
        [("12500", Decimal("12500")), ("99,90", Decimal("99.90")), ("", None)],
    )
    def test_price(self, session, raw, expected):
        session.set_field("price", raw)
        assert session.draft.price == expected

    def test_bad_price(self, session):
        with pytest.raises(ValidationError):
            session.set_field("price", "ten")

    def test_stock(self, session):
        session.set_field("stock_quantity", " 12 ")
        assert session.draft.stock_quantity == 12
        with pytest.raises(ValidationError):
            session.set_field("stock_quantity", "1.5")

    @pytest.mark.parametrize("raw, expected", [("yes", True), ("off", False), ("True", True)])
    def test_flags(self, session, raw, expected):
        session.set_field("hide_price", raw)
        assert session.draft.hide_price is expected

    def test_unknown_field(self, session):
        with pytest.raises(ValidationError):
            session.set_field("colour", "red")


class TestCategorySelection:
    def test_category_change_clears_subcategory(self, session):
        session.select_category(2)
        session.select_subcategory(21)
        assert session.ready is True

        session.select_category(1)
        assert session.draft.subcategory is None
        assert session.schema.names == {"capacity", "mast"}

    def test_waiting_for_subcategory(self, session):
        schema = session.select_category(2)
        assert schema.notice == SELECT_SUBCATEGORY
        assert session.ready is False

    def test_unknown_category(self, session):
        with pytest.raises(SchemaError):
            session.select_category(77)

    def test_subcategory_before_category(self, session):
        with pytest.raises(SchemaError):
            session.select_subcategory(21)


class TestAttributes:
    def test_select_option_checked(self, session):
        session.select_category(2)
        session.select_subcategory(21)
        with pytest.raises(ValidationError):
            session.set_attribute("voltage", "12")
        session.set_attribute("voltage", "24")
        assert session.values.get("voltage") == "24"

    def test_checkbox_toggle(self, session):
        session.select_category(2)
        session.select_subcategory(21)
        session.toggle_checkbox("features", "fast")
        session.toggle_checkbox("features", "bms")
        session.toggle_checkbox("features", "fast")
        assert session.values.get("features") == "bms"

        with pytest.raises(ValidationError):
            session.set_attribute("features", "bms")
        with pytest.raises(ValidationError):
            session.toggle_checkbox("features", "wifi")

    def test_field_outside_schema(self, session):
        session.select_category(1)
        with pytest.raises(ValidationError):
            session.set_attribute("voltage", "24")

    def test_type_toggle(self, session):
        assert session.toggle_type("used") == [TypeTag.used]
        assert session.toggle_type("used") == []


class TestPreview:
    def test_preview(self, session):
        assert session.preview() == ("", "")
        session.set_field("manufacturer", "Toyota")
        session.set_field("name", "Electric Forklift")
        title, url = session.preview()
        assert title == "Toyota Electric Forklift"
        assert url.endswith("/product/electric-forklift")


class TestEditMode:
    def test_for_product_seeds_everything(self, client, backend, directory):
        backend.seed_product(
            12,
            category=2, subcategory=21, name="Lithium pack", type='["used"]',
            product_details='{"voltage": "48", "features": ["bms"]}',
            media=[{"id": 1, "image": "https://cdn.test/a.jpg"}, {"id": 2, "image": "https://youtu.be/x"}],
            brochure="https://cdn.test/b.pdf",
        )
        session = asyncio.run(AuthoringSession.for_product(client, directory, 12))

        assert session.submit_label == "Update Product"
        assert session.draft.type == [TypeTag.used]
        assert session.schema.names == {"voltage", "features"}
        assert session.values.selected_options("features") == ["bms"]
        assert [m.id for m in session.media.persisted_images] == [1]
        assert [m.id for m in session.media.persisted_videos] == [2]
        assert session.media.brochure.locator == "https://cdn.test/b.pdf"
