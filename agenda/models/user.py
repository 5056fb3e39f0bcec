"""User model definitions."""

from sqlalchemy import Column, Integer, String
from agenda.database import Base


class User(Base):
    """Represents a registered account that can create or join appointments."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String)  # written by registration, never read here
