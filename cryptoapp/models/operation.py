from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from cryptoapp.core.database import Base

OPERATION_STATUSES = ("pending", "processing", "completed", "failed", "cancelled")
DEFAULT_STATUS = "pending"


class Operation(Base):
    __tablename__ = "operations"

    operation_id = Column(Integer, primary_key=True, index=True)

    # Owner. Always taken from the verified token, never from the request body.
    user_id = Column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # deposit, withdrawal, exchange, sell...
    operation_type = Column(String(50), nullable=False)

    # --- CRYPTO LEG ---
    crypto_currency = Column(String(50), nullable=True)
    crypto_amount = Column(Numeric(20, 8), nullable=True)

    # --- FIAT LEG ---
    fiat_currency = Column(String(50), nullable=True)
    fiat_amount = Column(Numeric(20, 2), nullable=True)

    # --- SETTLEMENT ---
    payment_method = Column(String(100), nullable=True)
    # Card number, IBAN, wallet address... stored as-is, never parsed
    wallet_address = Column(String(255), nullable=True)

    status = Column(String(50), nullable=False, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    owner = relationship("User", back_populates="operations")

    # Columns a client may change through PUT /operations/{id}
    MUTABLE_FIELDS = (
        "operation_type",
        "crypto_currency",
        "crypto_amount",
        "fiat_currency",
        "fiat_amount",
        "payment_method",
        "wallet_address",
        "status",
    )
