# cryptoapp/schemas/__init__.py

# 1. Users (registration, login, profile)
from .user import UserCreate, UserLogin, UserResponse, UserEnvelope

# 2. Authentication (JWT)
from .token import Token

# 3. Operations (ledger)
from .operation import (
    OperationCreate,
    OperationUpdate,
    OperationResponse,
    OperationEnvelope,
    OperationSummary,
    OperationList,
)
