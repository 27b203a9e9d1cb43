from .user import User
from .addresses import UserAddress
from .products import Product, Category
from .quote import Quote, QuoteItem, QuoteCounter, QuoteStatus, QuoteSource
from .blog import BlogPost, BlogPostTag

__all__ = [
    "User",
    "UserAddress",
    "Product",
    "Category",
    "Quote",
    "QuoteItem",
    "QuoteCounter",
    "QuoteStatus",
    "QuoteSource",
    "BlogPost",
    "BlogPostTag",
]
