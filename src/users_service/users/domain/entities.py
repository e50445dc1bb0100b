"""
Users Domain Entities
=====================

Pure Python business objects for the users module.
"""

from dataclasses import dataclass, replace
from typing import Optional

from users_service.core import ValidationException


@dataclass(frozen=True)
class User:
    """
    User entity.

    ``id`` is the string form of the document's ObjectId, ``None`` before
    the user is stored.
    """
    id: Optional[str]
    name: str
    lastname: str

    def __post_init__(self):
        """Validate user fields."""
        for field_name in ("name", "lastname"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationException(
                    f"User {field_name} must be a non-empty string",
                    {"field": field_name}
                )

    def with_id(self, user_id: str) -> "User":
        """Copy of this user carrying the stored id."""
        return replace(self, id=user_id)
