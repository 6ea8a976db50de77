"""SQLAlchemy database models for userservice."""

from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String

from userservice.database.database import Base


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (generated, immutable after creation)
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Contact fields
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=False)

    # Timestamps (system-set)
    created_on = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_on = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Optimistic-concurrency token
    version = Column(Integer, nullable=False, default=0)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from userservice.models.user import User

        return User(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            phone_number=self.phone_number,
            created_on=self.created_on,
            updated_on=self.updated_on,
            version=self.version,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model (id is left to the database)."""
        now = datetime.utcnow()
        return cls(
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone_number=user.phone_number,
            created_on=user.created_on or now,
            updated_on=user.updated_on or now,
            version=0,
        )
