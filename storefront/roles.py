"""
User roles.

Roles travel as plain text in request bodies, database rows and token claims;
`Role.parse` is the single place that text becomes a role.
"""
from enum import Enum


class Role(str, Enum):
    """Closed set of roles a user can hold."""
    CUSTOMER = "customer"
    RESELLER = "reseller"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value) -> "Role":
        """
        Convert text to a Role.

        Matching is exact and case-sensitive.

        Raises:
            ValueError: if the value is not a known role
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None
