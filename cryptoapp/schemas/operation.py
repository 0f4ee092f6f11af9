from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from cryptoapp.schemas.types import Code, CryptoAmount, FiatAmount, PaymentMethod, UTCDateTime, WalletAddress


# --- 1. CREATION (withdrawal form of the React client) ---
# user_id is not a field: the owner always comes from the token.
class OperationCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    operation_type: Code = None
    crypto_currency: Code = None
    crypto_amount: CryptoAmount = None
    fiat_currency: Code = None
    fiat_amount: FiatAmount = None
    payment_method: PaymentMethod = None
    wallet_address: WalletAddress = None
    status: Code = None


# --- 2. PARTIAL UPDATE ---
# Explicit allow-list of the mutable columns. Anything else is rejected.
class OperationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    operation_type: Code = None
    crypto_currency: Code = None
    crypto_amount: CryptoAmount = None
    fiat_currency: Code = None
    fiat_amount: FiatAmount = None
    payment_method: PaymentMethod = None
    wallet_address: WalletAddress = None
    status: Code = None


# --- 3. API RESPONSES ---
class OperationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    operation_id: int
    user_id: int
    operation_type: str
    crypto_currency: Optional[str] = None
    crypto_amount: Optional[Decimal] = None
    fiat_currency: Optional[str] = None
    fiat_amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    wallet_address: Optional[str] = None
    status: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class OperationEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    operation: OperationResponse


class OperationSummary(BaseModel):
    total_operations: int
    by_type: Dict[str, int]
    by_status: Dict[str, int]


class OperationList(BaseModel):
    success: bool = True
    count: int
    operations: List[OperationResponse]
    summary: OperationSummary
