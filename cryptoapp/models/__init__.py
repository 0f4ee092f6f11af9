# cryptoapp/models/__init__.py

# Importing both registers the tables on Base.metadata
from .user import User
from .operation import Operation, OPERATION_STATUSES, DEFAULT_STATUS
