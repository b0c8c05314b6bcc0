from cart_allergens.normalize import (
    clean_title,
    contains_word,
    normalize_ingredients,
    normalize_term,
    strip_label,
)


def test_separators_become_spaces():
    assert normalize_ingredients("Flour (Wheat), Salt; Oil/Fat: [Palm]") == "flour  wheat   salt  oil fat   palm "


def test_normalize_is_idempotent():
    once = normalize_ingredients("Milk, Soy (Lecithin)")
    assert normalize_ingredients(once) == once


def test_normalize_term():
    assert normalize_term("  Tree Nut ") == "tree nut"
    assert normalize_term(None) == ""


def test_contains_word_respects_boundaries():
    assert contains_word("whole milk powder", "milk")
    assert not contains_word("buttermilk", "milk")
    assert not contains_word("anything", "")


def test_strip_label():
    assert strip_label("Ingredients: Water, Salt") == "Water, Salt"
    assert strip_label("INGREDIENTS   Oats") == "Oats"


def test_clean_title():
    assert clean_title("  Organic\n   Bananas  Opens in a new tab") == "Organic Bananas"
    assert clean_title("Opens in a new tab") == ""
    assert clean_title(None) == ""
