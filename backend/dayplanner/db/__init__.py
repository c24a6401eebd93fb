"""Database utilities and models."""

from dayplanner.db.base import Base
from dayplanner.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
