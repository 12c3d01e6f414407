"""
Use cases for the Storefront service.

Each function validates preconditions, calls into ``crud`` and shapes the
resulting rows into response schemas. Failures are raised as the typed
errors in ``exceptions``; HTTP concerns stay in ``main``.
"""
from typing import List, Optional, Tuple
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .exceptions import DuplicateEmail, InvalidCredentials, NotFound, ValidationFailed
from .pagination import Paging, normalize, offset_for, paginate
from .roles import Role
from .security import DUMMY_HASH, hash_password, verify_password
from .tokens import issue_token

logger = logging.getLogger(__name__)


# DTO shaping

def product_without_users(product: models.Product) -> schemas.ProductWithoutUsers:
    return schemas.ProductWithoutUsers.model_validate(product)


def user_without_products(user: models.User) -> schemas.UserWithoutProducts:
    return schemas.UserWithoutProducts(
        id=user.id,
        firstname=user.first_name,
        lastname=user.last_name,
        email=user.email,
        role=Role.parse(user.role),
        created_at=user.created_at,
        updated_at=user.updated_at,
        deleted_at=user.deleted_at,
    )


def to_user_response(user: models.User) -> schemas.UserWithProducts:
    """Project a user with its active products; nested products carry no users."""
    base = user_without_products(user)
    products = [product_without_users(p) for p in user.products if p.deleted_at is None]
    return schemas.UserWithProducts(**base.model_dump(), products=products)


def to_product_response(product: models.Product) -> schemas.ProductWithUsers:
    """Project a product with its active users; nested users carry no products."""
    base = product_without_users(product)
    users = [user_without_products(u) for u in product.users if u.deleted_at is None]
    return schemas.ProductWithUsers(**base.model_dump(), users=users)


# Auth

def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_user(db: Session, payload: schemas.UserRegister) -> schemas.RegisteredUser:
    """
    Register a new user account.

    Raises:
        ValidationFailed: password and password_confirm differ (checked before any query)
        DuplicateEmail: the email is already registered
        HashError: the password could not be hashed
    """
    if payload.password != payload.password_confirm:
        raise ValidationFailed("Password not match")

    email = normalize_email(payload.email)
    if crud.get_user_by_email(db, email, include_deleted=True) is not None:
        logger.info("Registration rejected: email already registered")
        raise DuplicateEmail(f"user with email: {email} already exists")

    password_hash = hash_password(payload.password)
    try:
        user = crud.create_user(
            db,
            first_name=payload.firstname,
            last_name=payload.lastname,
            email=email,
            password_hash=password_hash,
            role=payload.role.value,
        )
    except IntegrityError as e:
        # Only a concurrent registration of the same email is a duplicate
        if crud.get_user_by_email(db, email, include_deleted=True) is not None:
            raise DuplicateEmail(f"user with email: {email} already exists") from e
        raise

    logger.info(f"Registered user {user.id} with role {user.role}")
    return schemas.RegisteredUser(
        id=user.id,
        username=f"{user.first_name} {user.last_name}",
        email=user.email,
        role=Role.parse(user.role),
        created_at=user.created_at,
        updated_at=user.updated_at,
        deleted_at=user.deleted_at,
    )


def authenticate_user(db: Session, email: str, password: str) -> models.User:
    """
    Authenticate a user by email and password.

    Unknown emails still run one bcrypt verification against DUMMY_HASH.

    Raises:
        InvalidCredentials: no active user with this email, or wrong password
    """
    user = crud.get_user_by_email(db, normalize_email(email))
    if user is None:
        verify_password(password, DUMMY_HASH)
        raise InvalidCredentials("Invalid email or password")
    if not verify_password(password, user.password):
        raise InvalidCredentials("Invalid email or password")
    return user


def login(db: Session, payload: schemas.UserLogin) -> Tuple[models.User, str]:
    """
    Authenticate and issue an access token.

    Returns:
        The authenticated user and the signed token
    """
    user = authenticate_user(db, payload.email, payload.password)
    token = issue_token(user.id, Role.parse(user.role))
    logger.info(f"User {user.id} logged in")
    return user, token


# Users

def list_users(db: Session, page: int, size: int) -> Tuple[List[schemas.UserWithProducts], Paging]:
    """Return one page of active users and its paging descriptor."""
    page, size = normalize(page, size)
    total = crud.count_users(db)
    users = crud.get_users(db, skip=offset_for(page, size), limit=size)
    return [to_user_response(u) for u in users], paginate(page, size, total)


def get_user(db: Session, user_id: int) -> schemas.UserWithProducts:
    """Raises NotFound when the user is absent or soft-deleted."""
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return to_user_response(user)


# Products

def list_products(db: Session, page: int, size: int) -> Tuple[List[schemas.ProductWithUsers], Paging]:
    """Return one page of active products and its paging descriptor."""
    page, size = normalize(page, size)
    total = crud.count_products(db)
    products = crud.get_products(db, skip=offset_for(page, size), limit=size)
    return [to_product_response(p) for p in products], paginate(page, size, total)


def get_product(db: Session, product_id: int) -> schemas.ProductWithUsers:
    """Raises NotFound when the product is absent or soft-deleted."""
    product = crud.get_product(db, product_id)
    if product is None:
        raise NotFound("Product not found")
    return to_product_response(product)


def products_by_stock(db: Session, stock: int) -> List[schemas.ProductWithUsers]:
    """Raises NotFound when no active product has exactly this stock."""
    products = crud.get_products_by_stock(db, stock)
    if not products:
        raise NotFound("Products not found")
    return [to_product_response(p) for p in products]


def resolve_users(db: Session, user_ids: Optional[List[int]]) -> Optional[List[models.User]]:
    """
    Load the active users named by ``user_ids``, in order and without repeats.

    Raises:
        NotFound: an id is unknown or belongs to a soft-deleted user
    """
    if user_ids is None:
        return None
    users = []
    for user_id in dict.fromkeys(user_ids):
        user = crud.get_user(db, user_id)
        if user is None:
            raise NotFound("User not found")
        users.append(user)
    return users


def create_product(db: Session, payload: schemas.ProductCreate) -> schemas.ProductWithUsers:
    """
    Create a product and enroll the users listed in ``user_ids``.

    Raises:
        NotFound: a listed user does not exist; nothing is written
    """
    users = resolve_users(db, payload.user_ids)
    product = crud.create_product(db, payload, users)
    logger.info(f"Created product {product.id}")
    return to_product_response(product)


def update_product(db: Session, product_id: int, payload: schemas.ProductUpdate) -> schemas.ProductWithUsers:
    """
    Apply a partial update. Concurrent updates to one product are last-write-wins.

    A present ``user_ids`` replaces the product's enrolled users.

    Raises:
        NotFound: the product, or a listed user, is absent or soft-deleted
    """
    users = resolve_users(db, payload.user_ids)
    product = crud.update_product(db, product_id, payload, users)
    if product is None:
        raise NotFound("Product not found")
    logger.info(f"Updated product {product_id}")
    return to_product_response(product)


def delete_product(db: Session, product_id: int) -> None:
    """
    Soft-delete a product.

    Raises:
        NotFound: the product is absent or already deleted
    """
    if not crud.soft_delete_product(db, product_id):
        raise NotFound("Product not found")
    logger.info(f"Deleted product {product_id}")
