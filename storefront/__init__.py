"""
Storefront service.

A FastAPI application exposing user registration/login and product catalog
management, with JWT authentication and role-based access control.
"""
