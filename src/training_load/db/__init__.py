"""Database module for athletes and sessions."""

from .database import TrainingDatabase, get_default_db_path

__all__ = ["TrainingDatabase", "get_default_db_path"]
