import pytest
from pydantic import ValidationError

from schemas import (
    DEFAULT_DISCOUNT_TIERS,
    BundleLineItem,
    DiscountTier,
    InvalidRecordError,
    Product,
    Variant,
    as_line_item,
    as_product,
    as_tier,
    as_variant,
    quantize_money,
    to_money,
)


class TestVariant:
    """Inbound variant coercion"""

    def test_camel_case_payload(self):
        variant = as_variant({"id": 7, "name": "Navy - 42R", "isActive": True, "stock": 3})
        assert variant.id == "7"
        assert variant.is_active is True
        assert variant.is_available is True

    def test_missing_active_flag_is_inactive(self):
        variant = as_variant({"name": "Navy - 42R", "stock": 3})
        assert variant.is_active is False
        assert variant.is_available is False

    @pytest.mark.parametrize("raw,expected", [
        ("7", 7),
        ("7.9", 7),
        (-3, 0),
        ("abc", 0),
        (None, 0),
        (float("inf"), 0),
    ])
    def test_stock_coercion(self, raw, expected):
        assert Variant(name="x", stock=raw).stock == expected

    def test_blank_size_and_color_are_absent(self):
        variant = Variant(name="x", size="  ", color="")
        assert variant.size is None
        assert variant.color is None

    def test_nan_price_is_absent(self):
        assert Variant(name="x", price="nan").price is None

    @pytest.mark.parametrize("raw", ["Infinity", "-inf", float("inf")])
    def test_infinite_price_is_absent(self, raw):
        assert Variant(name="x", price=raw).price is None

    def test_unknown_keys_ignored(self):
        assert as_variant({"name": "x", "barcode": "123"}).name == "x"

    def test_records_are_immutable(self):
        variant = Variant(name="x")
        with pytest.raises(ValidationError):
            variant.stock = 5


class TestProduct:
    def test_aliases_and_defaults(self):
        product = as_product({
            "id": "p1",
            "price": "120.50",
            "compareAtPrice": "bad",
            "pairsWellWith": ["Ties"],
            "variants": [{"name": "a", "stock": 2}, {"name": "b", "stock": 5}],
        })
        assert product.price == 120.5
        assert product.compare_at_price is None
        assert product.pairs_well_with == ["Ties"]
        assert product.total_stock == 7

    def test_null_lists_become_empty(self):
        product = as_product({"id": "p1", "variants": None, "pairsWellWith": None})
        assert product.variants == []
        assert product.pairs_well_with == []

    @pytest.mark.parametrize("raw,expected", [
        ("Ties", ["Ties"]),
        (("Ties", None, 3), ["Ties", "3"]),
        ({"Ties": True}, []),
        (7, []),
    ])
    def test_malformed_pairings(self, raw, expected):
        assert as_product({"id": "p1", "pairsWellWith": raw}).pairs_well_with == expected

    @pytest.mark.parametrize("raw", ["Navy - 42R", {"name": "a"}, 5])
    def test_non_list_variants_become_empty(self, raw):
        assert as_product({"id": "p1", "variants": raw}).variants == []

    def test_non_record_variant_entries_dropped(self):
        product = as_product({"id": "p1", "variants": [None, "x", {"name": "a", "stock": 1}]})
        assert [v.name for v in product.variants] == ["a"]

    def test_id_is_required(self):
        with pytest.raises(ValidationError):
            Product.model_validate({"name": "no id"})

    def test_model_passes_through(self):
        product = Product(id="p1")
        assert as_product(product) is product

    def test_dump_uses_camel_case(self):
        payload = Product(id="p1", compare_at_price=10).model_dump(by_alias=True)
        assert payload["compareAtPrice"] == 10
        assert "pairsWellWith" in payload


class TestBundleLineItem:
    def test_negative_quantity_clamped(self):
        assert as_line_item({"productId": "a", "quantity": -4}).quantity == 0

    def test_nested_variant(self):
        line = as_line_item({"productId": "a", "variant": {"size": "42R", "color": None}})
        assert line.variant.size == "42R"
        assert line.variant.color is None

    def test_snake_case_keywords(self):
        assert BundleLineItem(product_id=5).product_id == "5"


class TestDiscountTier:
    def test_type_is_lowercased(self):
        assert as_tier({"type": " Percentage ", "value": "10"}).type == "percentage"

    def test_to_dict_camel_case(self):
        tier = DiscountTier(type="fixed", value=5, min_items="3", description="d")
        assert tier.to_dict() == {"type": "fixed", "value": 5.0, "minItems": 3, "description": "d"}

    def test_unconditional_tier(self):
        assert as_tier({"type": "fixed", "value": 5}).min_items is None

    def test_default_tiers(self):
        assert [(t.min_items, t.value) for t in DEFAULT_DISCOUNT_TIERS] == [(2, 10), (3, 15), (4, 20)]


@pytest.mark.parametrize("converter", [as_variant, as_product, as_line_item, as_tier])
@pytest.mark.parametrize("record", [None, "p1", 42, ["id"]])
def test_missing_or_non_mapping_record(converter, record):
    with pytest.raises(InvalidRecordError):
        converter(record)


def test_invalid_record_error_is_type_error():
    assert issubclass(InvalidRecordError, TypeError)


def test_money_helpers():
    assert to_money(0.1) + to_money(0.2) == to_money("0.3")
    assert to_money(None) == 0
    assert quantize_money(to_money("2.675")) == 2.68
