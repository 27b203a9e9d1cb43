from .auth import (
    UserRegister,
    UserLogin,
    AddressIn,
    UserUpdateProfile,
    ChangePasswordRequest
)
from .users import UserAdminCreate, UserAdminUpdate, UserPasswordReset
from .products import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from .quotes import QuoteItemIn, QuoteCreate, QuoteUpdate, QuoteStatusUpdate
from .blog import BlogPostCreate, BlogPostUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "AddressIn",
    "UserUpdateProfile",
    "ChangePasswordRequest",
    "UserAdminCreate",
    "UserAdminUpdate",
    "UserPasswordReset",
    "CategoryCreate",
    "CategoryUpdate",
    "ProductCreate",
    "ProductUpdate",
    "QuoteItemIn",
    "QuoteCreate",
    "QuoteUpdate",
    "QuoteStatusUpdate",
    "BlogPostCreate",
    "BlogPostUpdate",
]
