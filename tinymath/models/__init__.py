"""SQLAlchemy ORM models.

All models are imported here so that Alembic can discover them
via ``Base.metadata`` when generating migrations.
"""

from tinymath.models.account import Account  # noqa: F401
from tinymath.models.child import ChildProfile  # noqa: F401

__all__ = [
    "Account",
    "ChildProfile",
]
