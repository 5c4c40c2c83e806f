"""
Database metadata registry.

Importing this module registers every table model with SQLModel's metadata,
which is required before calling ``create_all()``.
"""

from sqlmodel import SQLModel

import app.models  # noqa: F401

metadata = SQLModel.metadata
