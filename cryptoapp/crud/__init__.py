# cryptoapp/crud/__init__.py

# Credential Store and Operation Ledger, plain functions over a Session
from . import operations, users
