"""
Storefront domain exceptions.

Each exception carries the HTTP status the exception handlers render it with.
"""


class StorefrontError(Exception):
    """Base exception for storefront errors"""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ProductNotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class CategoryNotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class CategoryInUseError(StorefrontError):
    status_code = 409

    def __init__(self, category_id: int, product_count: int):
        self.category_id = category_id
        self.product_count = product_count
        super().__init__(f"Category {category_id} still has {product_count} product(s)")


class CartItemNotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"No cart item at position {index}")


class UserNotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with email {email} not found")


class EmailAlreadyRegisteredError(StorefrontError):
    status_code = 400

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InvalidImageError(StorefrontError):
    status_code = 400


class InvalidPasswordError(StorefrontError):
    status_code = 400


class OAuthError(StorefrontError):
    """Failure while talking to the OAuth2 identity provider"""

    status_code = 400

    def __init__(self, error_code: str, error_message: str):
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(f"{error_code}: {error_message}")
