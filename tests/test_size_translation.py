import pytest

from schemas.catalog_schemas import Product
from services.size_translation import recommend_shirt_fit, shirt_neck_for_suit, suggest_size


def make(category, sizes):
    return Product.model_validate({
        "id": category.lower(),
        "category": category,
        "variants": [
            {"name": size, "size": size, "stock": stock, "isActive": True}
            for size, stock in sizes
        ],
    })


@pytest.mark.parametrize("suit_size,neck", [
    ("38R", "15"),
    ("42R", "16"),
    ("48R", "17.5"),
    ("42L", None),
    (None, None),
])
def test_shirt_neck_for_suit(suit_size, neck):
    assert shirt_neck_for_suit(suit_size) == neck


class TestRecommendShirtFit:
    def test_slim_table(self):
        fit = recommend_shirt_fit("42R")
        assert (fit.size, fit.neck, fit.sleeve) == ("XL", 16.5, "35")

    def test_classic_derived_from_chest_and_length(self):
        fit = recommend_shirt_fit("42R", fit="classic")
        assert fit.size == "16 x 34-35"
        assert fit.neck == 16.0

    def test_slim_falls_back_to_classic(self):
        fit = recommend_shirt_fit("50L")
        assert fit.size == "18 x 36-37"

    def test_fractional_neck_label(self):
        assert recommend_shirt_fit("40S", fit="classic").size == "15.5 x 32-33"

    @pytest.mark.parametrize("suit_size", ["62R", "42T", "big", ""])
    def test_unknown_sizes(self, suit_size):
        assert recommend_shirt_fit(suit_size, fit="classic") is None


class TestSuggestSize:
    suit = make("Suits", [("42R", 1)])

    def test_exact_in_stock_match_first(self):
        candidate = make("Suits", [("40R", 2), ("42R", 1)])
        assert suggest_size(self.suit, candidate, "42R") == "42R"

    def test_mapped_neck_for_suit_to_shirt(self):
        shirt = make("Shirts", [('15"', 1), ('16"', 0), ("16", 4)])
        assert suggest_size(self.suit, shirt, "42R") == "16"

    def test_falls_back_to_first_in_stock(self):
        shirt = make("Shirts", [('15"', 0), ('17"', 2)])
        assert suggest_size(self.suit, shirt, "42R") == '17"'

    def test_mapping_only_for_suit_to_shirt(self):
        tie = make("Ties", [("16", 0), ("One Size", 3)])
        assert suggest_size(self.suit, tie, "42R") == "One Size"

    def test_nothing_in_stock(self):
        shirt = make("Shirts", [('16"', 0)])
        assert suggest_size(self.suit, shirt, "42R") is None

    def test_no_variants(self):
        assert suggest_size(self.suit, make("Shirts", []), "42R") is None
