from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from cryptoapp.core.database import Base


class User(Base):
    __tablename__ = "users"

    # --- IDENTITY ---
    user_id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # bcrypt hash only, the plain password is never stored
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    operations = relationship(
        "Operation",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
