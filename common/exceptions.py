"""
Storefront - Custom Exceptions
================================
Business-level exceptions that can be caught and converted to HTTP responses.
"""

from fastapi import HTTPException


class StorefrontError(Exception):
    """Base exception for all business logic errors."""
    def __init__(self, message: str = "Something went wrong. Please try again."):
        self.message = message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Raised for blank or malformed form input."""
    pass


# ==========================================
# Session / User Directory
# ==========================================

class UsernameTakenError(StorefrontError):
    """Raised when signing up with a username that already exists."""
    def __init__(self):
        super().__init__("Username already exists. Please sign in.")


class InvalidCredentialsError(StorefrontError):
    """Raised when no user matches the given username and password."""
    def __init__(self):
        super().__init__("Invalid credentials. Please try again.")


# ==========================================
# Cart / Checkout
# ==========================================

class EmptyCartError(StorefrontError):
    """Raised when pricing or checking out an empty cart."""
    def __init__(self):
        super().__init__("Your cart is empty. Add items before proceeding to checkout.")


class InvalidCartDataError(StorefrontError):
    """Raised when a cart line has a non-numeric price or quantity."""
    def __init__(self):
        super().__init__("Cart data is invalid. Please try adding items again.")


class MissingDeliveryAddressError(StorefrontError):
    def __init__(self):
        super().__init__("Please enter a delivery address.")


class MissingPaymentMethodError(StorefrontError):
    def __init__(self):
        super().__init__("Please select a payment method.")


# ==========================================
# Catalog
# ==========================================

class CatalogFetchError(StorefrontError):
    """Raised when the external product API is unreachable or returns garbage."""
    def __init__(self, message: str = "Error fetching products."):
        super().__init__(message)


def raise_http(error: StorefrontError, status_code: int = 400):
    """Convert a business exception to an HTTP exception."""
    raise HTTPException(status_code=status_code, detail=error.message)
