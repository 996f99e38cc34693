"""Storefront: e-commerce REST backend (catalog, wishlist, cart, checkout, admin)."""

__version__ = "1.0.0"
