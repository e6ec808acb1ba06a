from sqlalchemy import Column, Enum, String, DateTime
from sqlalchemy.sql import func
import enum
from buildbooks.core.database import Base
from buildbooks.models.common import generate_custom_id


class UserRole(str, enum.Enum):
    owner = "owner"
    accountant = "accountant"


class User(Base):
    """Someone who enters or approves ledger records. Credentials live with the identity provider."""
    __tablename__ = "users"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("USR"))
    email = Column(String(255), unique=True, nullable=True)
    name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.accountant)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id='{self.id}', role='{self.role}')>"
