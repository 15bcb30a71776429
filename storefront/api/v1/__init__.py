"""
API v1 package.

Contains the account lifecycle and product catalog routers.
"""

from storefront.api.v1.auth import router as auth_router
from storefront.api.v1.products import router as products_router

__all__ = ["auth_router", "products_router"]
