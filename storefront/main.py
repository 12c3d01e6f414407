"""
Storefront Service API

This module implements a FastAPI application for user accounts and a product
catalog. Users register and log in to receive a JWT (returned in the body and
set as an HTTP-only ``token`` cookie); every other route is gated by the
caller's role.

Endpoints (under API_PREFIX, default /api/v1):
    POST /auth/register: Register a new account
    POST /auth/login: Log in and receive a token
    GET /auth/logout: Clear the token cookie
    GET /profiles: List users with pagination
    GET /profiles/{user_id}: Get a single user
    GET /products: List products with pagination
    GET /products/{product_id}: Get a single product
    GET /products/stock/{stock}: Get products with an exact stock count
    POST /products: Create a product
    PUT /products/{product_id}: Update a product
    DELETE /products/{product_id}: Soft-delete a product
    GET /healthz: Health check endpoint for orchestration systems

Attributes:
    app (FastAPI): The FastAPI application instance configured with the title "storefront-service"
"""
from typing import List
import logging
from fastapi import APIRouter, FastAPI, Depends, Path, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models, schemas, services
from .auth import RequireRoles
from .config import (
    API_PREFIX,
    COOKIE_MAX_AGE,
    DEFAULT_PAGE_SIZE,
    LOG_LEVEL,
    MAX_ID,
    ROUTE_ROLES,
    SECURE_COOKIES,
    TOKEN_COOKIE_NAME,
)
from .database import engine, get_db
from .exceptions import AppError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="storefront-service")
router = APIRouter(prefix=API_PREFIX)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the {status, message} error envelope."""
    return JSONResponse(
        status_code=status_code,
        content=schemas.StatusResponse(status=status_code, message=message).model_dump(),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the storefront service.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): Always returns "healthy" when the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}


# Auth

@router.post(
    "/auth/register",
    response_model=schemas.SingleResponse[schemas.RegisteredUser],
    status_code=status.HTTP_201_CREATED,
)
def register(payload: schemas.UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account.

    Args:
        payload: Registration data (names, email, password twice, role)
        db: Database session (injected)

    Returns:
        The created account, without its password

    Raises:
        ValidationFailed: 400 if the passwords do not match
        DuplicateEmail: 500 if the email is already registered
    """
    user = services.register_user(db, payload)
    return schemas.SingleResponse(status=status.HTTP_201_CREATED, message="User registered successfully", data=user)


@router.post("/auth/login", response_model=schemas.SingleResponse[schemas.Token])
def login(payload: schemas.UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Authenticate a user and issue a token.

    The token is returned in the body for Bearer clients and set as an
    HTTP-only cookie for browser clients.

    Raises:
        InvalidCredentials: 401 if the email/password pair is wrong
    """
    _, token = services.login(db, payload)
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        value=token,
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=SECURE_COOKIES,
    )
    return schemas.SingleResponse(status=status.HTTP_200_OK, message="Successfully Login", data=schemas.Token(token=token))


@router.get("/auth/logout", response_model=schemas.StatusResponse)
def logout(response: Response):
    """Clear the token cookie."""
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/", httponly=True, secure=SECURE_COOKIES)
    return schemas.StatusResponse(status=status.HTTP_200_OK, message="Logout successfully!")


# Profiles

@router.get("/profiles", response_model=schemas.PagedResponse[schemas.UserWithProducts])
def list_profiles(
    page: int = Query(1, le=MAX_ID),
    size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["list_profiles"])),
):
    """
    List users with pagination.

    Args:
        page: Page number, values below 1 are treated as 1
        size: Page size, values below 1 fall back to the default
        db: Database session (injected)
        current_user: Authenticated caller (injected)

    Returns:
        One page of users with their products
    """
    users, paging = services.list_users(db, page, size)
    return schemas.PagedResponse(status=status.HTTP_200_OK, message="Ok", data=users, paging=paging)


@router.get("/profiles/{user_id}", response_model=schemas.SingleResponse[schemas.UserWithProducts])
def get_profile(
    user_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["get_profile"])),
):
    """
    Get a single user by ID.

    Raises:
        NotFound: 404 if the user does not exist
    """
    user = services.get_user(db, user_id)
    return schemas.SingleResponse(status=status.HTTP_200_OK, message="Ok", data=user)


# Products

@router.get("/products", response_model=schemas.PagedResponse[schemas.ProductWithUsers])
def list_products(
    page: int = Query(1, le=MAX_ID),
    size: int = Query(DEFAULT_PAGE_SIZE, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["list_products"])),
):
    """
    List products with pagination.

    An empty page is a 200 with an empty data list.
    """
    products, paging = services.list_products(db, page, size)
    return schemas.PagedResponse(status=status.HTTP_200_OK, message="Ok", data=products, paging=paging)


@router.get("/products/stock/{stock}", response_model=schemas.SingleResponse[List[schemas.ProductWithUsers]])
def get_products_by_stock(
    stock: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["get_products_by_stock"])),
):
    """
    Get all products whose stock equals the given value.

    Raises:
        NotFound: 404 if no product matches
    """
    products = services.products_by_stock(db, stock)
    return schemas.SingleResponse(status=status.HTTP_200_OK, message="Ok", data=products)


@router.get("/products/{product_id}", response_model=schemas.SingleResponse[schemas.ProductWithUsers])
def get_product(
    product_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["get_product"])),
):
    """
    Get a single product by ID.

    Raises:
        NotFound: 404 if the product does not exist
    """
    product = services.get_product(db, product_id)
    return schemas.SingleResponse(status=status.HTTP_200_OK, message="Ok", data=product)


@router.post(
    "/products",
    response_model=schemas.SingleResponse[schemas.ProductWithUsers],
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["create_product"])),
):
    """
    Create a new product.

    Args:
        payload: Product data to create, optionally with user_ids to enroll
        db: Database session (injected)
        current_user: Authenticated reseller or admin (injected)

    Returns:
        Created product

    Raises:
        NotFound: 404 if a listed user does not exist
    """
    product = services.create_product(db, payload)
    return schemas.SingleResponse(status=status.HTTP_201_CREATED, message="Product created successfully", data=product)


@router.put("/products/{product_id}", response_model=schemas.SingleResponse[schemas.ProductWithUsers])
def update_product(
    payload: schemas.ProductUpdate,
    product_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["update_product"])),
):
    """
    Update an existing product. Only fields present in the body are changed;
    user_ids, when present, replaces the enrolled users.

    Raises:
        NotFound: 404 if the product or a listed user does not exist
    """
    product = services.update_product(db, product_id, payload)
    return schemas.SingleResponse(status=status.HTTP_200_OK, message="Product updated successfully", data=product)


@router.delete("/products/{product_id}", response_model=schemas.StatusResponse)
def delete_product(
    product_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(RequireRoles(*ROUTE_ROLES["delete_product"])),
):
    """
    Soft-delete a product.

    Raises:
        NotFound: 404 if the product does not exist
    """
    services.delete_product(db, product_id)
    return schemas.StatusResponse(status=status.HTTP_200_OK, message="Product deleted successfully")


app.include_router(router)
