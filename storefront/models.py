"""
SQLAlchemy ORM models for the Storefront service.

Defines the database schema for users, products and the enrollments
join table linking them.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Table, Text
from sqlalchemy.orm import relationship
from .database import Base

enrollments = Table(
    "enrollments",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id"), primary_key=True),
)


class User(Base):
    """
    User model representing an account in the system.

    Attributes:
        id (int): Primary key, auto-incremented user ID
        first_name (str): User's first name
        last_name (str): User's last name
        email (str): User's email address (unique)
        password (str): Bcrypt hash of the user's password
        role (str): User role (customer, reseller, admin)
        created_at (datetime): Timestamp when the user was created
        updated_at (datetime): Timestamp of the last change
        deleted_at (datetime): Soft-delete marker, None while the user is active
        products (list): Products the user is enrolled in
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)

    products = relationship("Product", secondary=enrollments, back_populates="users", lazy="selectin")


class Product(Base):
    """
    Product model representing a catalog entry.

    Attributes:
        id (int): Primary key, auto-incremented product ID
        name (str): Product name
        description (str): Product description
        stock (int): Units available, never negative
        price (Decimal): Unit price, never negative
        created_at (datetime): Timestamp when the product was created
        updated_at (datetime): Timestamp of the last change
        deleted_at (datetime): Soft-delete marker, None while the product is active
        users (list): Users enrolled in the product
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)

    users = relationship("User", secondary=enrollments, back_populates="products", lazy="selectin")
