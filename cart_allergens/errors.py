from __future__ import annotations


class CartAllergensError(RuntimeError):
    """Base class for every error raised by the scan pipeline."""


class CartNotFoundError(CartAllergensError):
    def __init__(self, message: str = "Cart not found. Please make sure you're on the Amazon Fresh cart page."):
        super().__init__(message)


class NoItemsFoundError(CartAllergensError):
    def __init__(self, message: str = "No products found in cart. Please make sure your cart contains items."):
        super().__init__(message)


class MissingHrefError(CartAllergensError):
    def __init__(self, message: str = "Missing href attribute on element"):
        super().__init__(message)


class FetchError(CartAllergensError):
    """Non-2xx response or transport failure for one product page."""


class NoIngredientsFound(CartAllergensError):
    def __init__(self, message: str = "No ingredients section found in the parsed HTML"):
        super().__init__(message)
