"""
Pydantic schemas for request/response validation in the Storefront service.

Users and products reference each other, so each side has two projections:
the "with" form embeds the other side, the "without" form does not. A nested
entry never expands further.
"""
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, EmailStr, Field, conint

from .config import MAX_ID
from .pagination import Paging
from .roles import Role

T = TypeVar("T")
UserId = conint(ge=0, le=MAX_ID)


class UserRegister(BaseModel):
    """Schema for user registration."""
    firstname: str = Field(..., min_length=1, max_length=300)
    lastname: str = Field(..., min_length=1, max_length=300)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72, description="Password must be at least 8 characters")
    password_confirm: str
    role: Role = Role.CUSTOMER


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for the login response body."""
    token: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    """Identity attached to a request that passed the access policy."""
    id: int
    role: Role


class ProductCreate(BaseModel):
    """Schema for creating a new product."""
    name: str = Field(..., min_length=1)
    description: str
    stock: int = Field(..., ge=0, le=MAX_ID, description="Units in stock")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Unit price")
    user_ids: Optional[List[UserId]] = Field(default=None, description="Users to enroll in the product")


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_ID)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    user_ids: Optional[List[UserId]] = Field(default=None, description="Replaces the enrolled users when present")


class ProductWithoutUsers(BaseModel):
    """A product as it appears nested inside a user."""
    id: int
    name: str
    description: str
    stock: int
    price: Decimal
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithoutProducts(BaseModel):
    """A user as it appears nested inside a product."""
    id: int
    firstname: str
    lastname: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class UserWithProducts(UserWithoutProducts):
    """Profile response: a user and the products they are enrolled in."""
    products: List[ProductWithoutUsers] = Field(default_factory=list)


class ProductWithUsers(ProductWithoutUsers):
    """Product response: a product and its enrolled users."""
    users: List[UserWithoutProducts] = Field(default_factory=list)


class RegisteredUser(BaseModel):
    """Body returned after a successful registration."""
    id: int
    username: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class StatusResponse(BaseModel):
    """Envelope for responses without a payload, including errors."""
    status: int
    message: str


class SingleResponse(BaseModel, Generic[T]):
    """Envelope for a single item (or a plain list) payload."""
    status: int
    message: str
    data: T


class PagedResponse(BaseModel, Generic[T]):
    """Envelope for one page of a list endpoint."""
    status: int
    message: str
    data: List[T]
    paging: Paging
