import pytest

from cart_allergens.dom import parse_document
from cart_allergens.errors import NoIngredientsFound
from cart_allergens.extract import (
    STRATEGIES,
    NamedStrategy,
    category_of,
    extract,
    extract_ingredients,
    labeled_info_section,
    nutrition_facts,
    run_strategies,
)


def _page(body):
    return f"<html><head><title>Product</title></head><body>{body}</body></html>"


LIST_ITEM = _page(
    '<div id="detailBullets_feature_div"><ul>'
    '<li><span class="a-text-bold">Manufacturer:</span> Acme</li>'
    '<li><span class="a-text-bold">Ingredients:</span> Oats, Honey</li>'
    "</ul></div>"
)

TABLE_ROW = _page(
    '<table id="productDetails">'
    "<tr><th>Brand</th><td>Acme</td></tr>"
    "<tr><th>Ingredients</th><td> Water, Salt </td></tr>"
    "</table>"
)

FEATURE_BULLETS = _page(
    '<div id="feature-bullets"><ul>'
    "<li>Great taste.</li>"
    "<li>Ingredients: Almonds, Sea Salt. Roasted in small batches</li>"
    "</ul></div>"
)

INFO_SECTION = _page(
    '<div id="importantInformation"><div class="a-section">'
    "<h4>Safety Information</h4><p>Keep dry</p>"
    "<h4>Ingredients</h4><p>Rice, Salt</p>"
    "</div></div>"
)

HEADING = _page('<div class="a-section"><h3>Ingredients</h3><span>Cocoa, Sugar</span></div>')

GLOBAL = _page("<p>Allergy advice\nIngredients: Peas, Carrots\nStore in a cool place</p>")

NOT_FOOD = _page(
    '<div id="wayfinding-breadcrumbs_feature_div"><ul>\n'
    "<li> Electronics </li>\n<li> › </li>\n<li> Cables </li>\n"
    "</ul></div><p>USB-C cable, 2 m</p>"
)


@pytest.mark.parametrize(
    "html, strategy, expected",
    [
        (LIST_ITEM, "labeled_list_item", "Oats, Honey"),
        (TABLE_ROW, "labeled_table_row", "Water, Salt"),
        (FEATURE_BULLETS, "feature_bullet_text", "Almonds, Sea Salt"),
        (INFO_SECTION, "labeled_info_section", "Rice, Salt"),
        (HEADING, "any_heading", "Cocoa, Sugar"),
        (GLOBAL, "global_text", "Peas, Carrots"),
    ],
)
def test_each_layout_resolves_through_its_strategy(html, strategy, expected):
    assert run_strategies(parse_document(html)) == (strategy, expected)


def test_feature_bullets_found_after_earlier_strategies_miss():
    doc = parse_document(FEATURE_BULLETS)
    first_two = STRATEGIES[:2]
    assert all(s.run(doc) is None for s in first_two)
    assert extract_ingredients(FEATURE_BULLETS) == "Almonds, Sea Salt"


def test_earlier_strategy_wins():
    html = _page(
        '<table class="prodDetTable"><tr><th>Ingredients</th><td>From table</td></tr></table>'
        '<div id="feature-bullets">Ingredients: From bullets.</div>'
    )
    assert extract_ingredients(html) == "From table"


def test_empty_label_falls_through():
    html = _page(
        '<div id="detailBullets_feature_div"><ul><li><span class="a-text-bold">Ingredients:</span></li></ul></div>'
        '<table class="a-keyvalue"><tr><th>Ingredients</th><td>Tapioca</td></tr></table>'
    )
    assert extract_ingredients(html) == "Tapioca"


def test_info_section_uses_parent_text_when_no_sibling():
    html = _page('<div class="important-information"><p><b>Ingredients:</b> Corn, Lime</p></div>')
    assert labeled_info_section(parse_document(html)) == "Corn, Lime"


def test_nutrition_facts_strategy():
    html = _page('<div class="nutrition-facts">Calories 90\nIngredients: Kale, Salt\n</div>')
    assert nutrition_facts(parse_document(html)) == "Kale, Salt"


def test_custom_strategy_list():
    html = _page("<p>Ingredients: Peas</p>")
    only_first = (STRATEGIES[0],)
    with pytest.raises(NoIngredientsFound):
        extract_ingredients(html, strategies=only_first)
    always = (NamedStrategy("fixed", lambda doc: "Fixed"),)
    assert extract_ingredients(html, strategies=always) == "Fixed"


def test_no_ingredients_raises():
    with pytest.raises(NoIngredientsFound):
        extract_ingredients(NOT_FOOD)


def test_no_ingredients_outcome_explains_category():
    outcome = extract(NOT_FOOD)
    assert outcome.ingredients == "No ingredients found"
    assert outcome.parse_error.endswith("Category: Electronics › Cables")
    assert "non-food item" in outcome.parse_error


def test_no_ingredients_without_breadcrumbs():
    outcome = extract(_page("<p>Gift card</p>"))
    assert outcome.parse_error.endswith("Category: Unknown category")


def test_category_of():
    assert category_of(parse_document(NOT_FOOD)) == "Electronics › Cables"
    assert category_of(parse_document(_page(""))) is None


def test_success_outcome():
    outcome = extract(LIST_ITEM)
    assert outcome.ingredients == "Oats, Honey"
    assert outcome.parse_error is None
