"""
CRUD (Create, Read, Update, Delete) operations for the Storefront service.

This module contains all database operations for users and products.
Soft-deleted rows (``deleted_at`` set) are invisible to every read here
unless a function says otherwise.
"""
from datetime import datetime
from typing import List, Optional
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from . import models, schemas

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    """Commit the session, rolling back before re-raising on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database commit failed: {e}")
        raise


# Users

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    """
    Retrieve a single active user by ID.

    Args:
        db: Database session
        user_id: ID of the user to retrieve

    Returns:
        User object or None if not found or soft-deleted
    """
    return (
        db.query(models.User)
        .filter(models.User.id == user_id, models.User.deleted_at.is_(None))
        .first()
    )


def get_user_by_email(db: Session, email: str, include_deleted: bool = False) -> Optional[models.User]:
    """
    Retrieve a user by email address.

    Args:
        db: Database session
        email: Email address to search for
        include_deleted: Also match soft-deleted users (the unique index still covers them)

    Returns:
        User object or None if not found
    """
    query = db.query(models.User).filter(models.User.email == email)
    if not include_deleted:
        query = query.filter(models.User.deleted_at.is_(None))
    return query.first()


def count_users(db: Session) -> int:
    """Count active users."""
    return db.query(models.User).filter(models.User.deleted_at.is_(None)).count()


def get_users(db: Session, skip: int = 0, limit: int = 10) -> List[models.User]:
    """
    Retrieve a page of active users, ordered by ID.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return

    Returns:
        List of User objects with their products loaded
    """
    return (
        db.query(models.User)
        .filter(models.User.deleted_at.is_(None))
        .order_by(models.User.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


def create_user(
    db: Session,
    first_name: str,
    last_name: str,
    email: str,
    password_hash: str,
    role: str,
) -> models.User:
    """
    Create a new user in the database.

    Args:
        db: Database session
        first_name: User's first name
        last_name: User's last name
        email: Normalized email address
        password_hash: Bcrypt hash of the password
        role: Role value

    Returns:
        Created User object
    """
    db_user = models.User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=password_hash,
        role=role,
    )
    db.add(db_user)
    _commit(db)
    db.refresh(db_user)
    return db_user


# Products

def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    """
    Retrieve a single active product by ID.

    Args:
        db: Database session
        product_id: ID of the product to retrieve

    Returns:
        Product object or None if not found or soft-deleted
    """
    return (
        db.query(models.Product)
        .filter(models.Product.id == product_id, models.Product.deleted_at.is_(None))
        .first()
    )


def count_products(db: Session) -> int:
    """Count active products."""
    return db.query(models.Product).filter(models.Product.deleted_at.is_(None)).count()


def get_products(db: Session, skip: int = 0, limit: int = 10) -> List[models.Product]:
    """
    Retrieve a page of active products, ordered by ID.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return

    Returns:
        List of Product objects with their users loaded
    """
    return (
        db.query(models.Product)
        .filter(models.Product.deleted_at.is_(None))
        .order_by(models.Product.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_products_by_stock(db: Session, stock: int) -> List[models.Product]:
    """
    Retrieve all active products whose stock equals the given value.

    Args:
        db: Database session
        stock: Exact stock count to match

    Returns:
        List of Product objects, possibly empty
    """
    return (
        db.query(models.Product)
        .filter(models.Product.stock == stock, models.Product.deleted_at.is_(None))
        .order_by(models.Product.id)
        .all()
    )


def create_product(
    db: Session,
    product: schemas.ProductCreate,
    users: Optional[List[models.User]] = None,
) -> models.Product:
    """
    Create a new product in the database.

    Args:
        db: Database session
        product: Product data to create
        users: Users to enroll in the product

    Returns:
        Created Product object
    """
    db_product = models.Product(**product.model_dump(exclude={"user_ids"}))
    if users:
        db_product.users = users
    db.add(db_product)
    _commit(db)
    db.refresh(db_product)
    return db_product


def update_product(
    db: Session,
    product_id: int,
    product: schemas.ProductUpdate,
    users: Optional[List[models.User]] = None,
) -> Optional[models.Product]:
    """
    Update an existing product.

    Args:
        db: Database session
        product_id: ID of the product to update
        product: Updated product data (only provided fields will be updated)
        users: Replacement set of enrolled users, None leaves enrollments unchanged

    Returns:
        Updated Product object or None if not found
    """
    db_product = get_product(db, product_id)
    if db_product is None:
        return None

    update_data = product.model_dump(exclude_unset=True, exclude_none=True, exclude={"user_ids"})
    for key, value in update_data.items():
        setattr(db_product, key, value)
    if users is not None:
        db_product.users = users

    _commit(db)
    db.refresh(db_product)
    return db_product


def soft_delete_product(db: Session, product_id: int) -> bool:
    """
    Mark a product as deleted.

    Args:
        db: Database session
        product_id: ID of the product to delete

    Returns:
        True if the product was deleted, False if not found
    """
    db_product = get_product(db, product_id)
    if db_product is None:
        return False

    db_product.deleted_at = datetime.utcnow()
    _commit(db)
    return True
