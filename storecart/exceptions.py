"""
Cart outcomes that callers can tell apart.

Every failure leaving the cart layer is one of these, so the HTTP layer can map
it to a status code without inspecting driver errors.
"""


class CartError(Exception):
    """Base exception for the cart aggregate."""

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class CartNotFoundError(CartError):
    """Raised when a read addresses a user that has no cart."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Cart not found for this user",
            code="CART_NOT_FOUND",
        )
        self.user_id = user_id


class CartAlreadyExistsError(CartError):
    """Raised by explicit creation when the user already owns a cart."""

    def __init__(self, cart):
        super().__init__(
            message="Cart already exists for this user",
            code="CART_ALREADY_EXISTS",
        )
        self.cart = cart


class CartPersistenceError(CartError):
    """Raised when the database is unreachable or rejects a write."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CART_PERSISTENCE_ERROR")
