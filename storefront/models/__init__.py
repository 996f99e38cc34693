# Import every model so Base.metadata knows all tables
from storefront.models.users import User
from storefront.models.session import UserSession
from storefront.models.product import Product
from storefront.models.wishlist import WishlistItem
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.log import Log

__all__ = ["User", "UserSession", "Product", "WishlistItem", "CartItem", "Order", "OrderItem", "Log"]
