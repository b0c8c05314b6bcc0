import pytest

from cart_allergens.dom import parse_document
from cart_allergens.errors import CartNotFoundError, MissingHrefError, NoItemsFoundError
from cart_allergens.locate import find_cart_root, locate_cart_items, to_absolute
from cart_allergens.models import CartItemRef

BASE = "https://www.amazon.com/cart/localmarket?ref=nav"


def _cart(body, container='id="sc-expanded-cart-localmarket"'):
    return f"<html><body><div {container}>{body}</div></body></html>"


def _item(href=None, title="Product", link_class="sc-product-link"):
    href_attr = f' href="{href}"' if href is not None else ""
    return f'<div class="sc-list-item"><a class="{link_class}"{href_attr}>{title}</a></div>'


def test_to_absolute_uses_origin():
    assert to_absolute("/dp/B0001", BASE) == "https://www.amazon.com/dp/B0001"
    assert to_absolute("https://other.example/x", BASE) == "https://other.example/x"


def test_to_absolute_requires_href():
    with pytest.raises(MissingHrefError):
        to_absolute(None, BASE)
    with pytest.raises(MissingHrefError):
        to_absolute("", BASE)


def test_item_without_href_is_dropped():
    html = _cart(
        _item("/dp/B000000001", "Oat Milk")
        + _item(None, "Mystery")
        + _item("/dp/B000000003", "Rice Cakes")
    )
    items = locate_cart_items(html, BASE)
    assert items == [
        CartItemRef(url="https://www.amazon.com/dp/B000000001", title="Oat Milk"),
        CartItemRef(url="https://www.amazon.com/dp/B000000003", title="Rice Cakes"),
    ]


def test_same_url_via_different_anchor_strategies_dedups():
    html = _cart(
        _item("/dp/B000000001", "Oat Milk")
        + '<div class="sc-product-item"><a href="https://www.amazon.com/dp/B000000001">Oat Milk again</a></div>'
    )
    items = locate_cart_items(html, BASE)
    assert len(items) == 1
    assert items[0].title == "Oat Milk"


def test_nested_item_nodes_yield_one_ref():
    html = _cart(
        '<div class="sc-list-item"><div class="sc-list-item-content">'
        '<a class="sc-product-link" href="/dp/B000000001">Bananas</a>'
        "</div></div>"
    )
    assert len(locate_cart_items(html, BASE)) == 1


def test_anchor_selector_priority():
    html = _cart(
        '<div class="sc-list-item">'
        '<a class="a-link-normal" href="/gp/help">Help</a>'
        '<a class="sc-product-link" href="/dp/B000000009">Hummus</a>'
        "</div>"
    )
    items = locate_cart_items(html, BASE)
    assert items[0].url.endswith("/dp/B000000009")
    assert items[0].title == "Hummus"


def test_href_pattern_fallback():
    html = _cart('<div class="sc-list-item"><a href="/Some-Bread/dp/B000000005">Bread</a></div>')
    assert locate_cart_items(html, BASE)[0].url == "https://www.amazon.com/Some-Bread/dp/B000000005"


def test_placeholder_titles_fall_back():
    html = _cart(_item("/dp/B000000001", "") + _item("/dp/B000000002", "Opens in a new tab"))
    assert [i.title for i in locate_cart_items(html, BASE)] == ["Unknown Product", "Unknown Product"]


def test_cart_container_priority():
    html = (
        "<html><body>"
        '<div class="sc-list-body">' + _item("/dp/B000000001", "Wrong cart") + "</div>"
        '<div id="sc-expanded-cart-localmarket">' + _item("/dp/B000000002", "Fresh cart") + "</div>"
        "</body></html>"
    )
    items = locate_cart_items(html, BASE)
    assert [i.title for i in items] == ["Fresh cart"]


def test_fallback_container():
    html = _cart(_item("/dp/B000000001", "Eggs"), container='class="sc-list-items"')
    assert find_cart_root(parse_document(html))["class"] == ["sc-list-items"]
    assert len(locate_cart_items(html, BASE)) == 1


def test_cart_not_found():
    with pytest.raises(CartNotFoundError):
        locate_cart_items("<html><body><p>Your session expired</p></body></html>", BASE)


def test_empty_cart():
    with pytest.raises(NoItemsFoundError):
        locate_cart_items(_cart(""), BASE)


def test_cart_with_only_unlinked_items():
    with pytest.raises(NoItemsFoundError):
        locate_cart_items(_cart(_item(None, "A") + _item(None, "B")), BASE)
