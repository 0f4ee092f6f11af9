from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cryptoapp import crud, schemas
from cryptoapp.core.database import Database, get_database, get_db
from cryptoapp.oauth2 import get_current_user_id

# Every route here sits behind the auth gateway
router = APIRouter(
    prefix="/operations",
    tags=["Operations"],
    dependencies=[Depends(get_current_user_id)],
)


# --- 1. CREATE ---
@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.OperationEnvelope)
def create_operation(
    operation: schemas.OperationCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        new_operation = crud.operations.create(db, user_id, operation)

    return {"message": "Operation created", "operation": new_operation}


# --- 2. HISTORY (newest first) ---
@router.get("", response_model=schemas.OperationList)
def list_operations(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        operations = crud.operations.list_by_owner(db, user_id)

    return {
        "count": len(operations),
        "operations": operations,
        "summary": crud.operations.summarize(operations),
    }


# --- 3. ONE OPERATION ---
@router.get("/{operation_id}", response_model=schemas.OperationEnvelope)
def get_operation(
    operation_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        operation = crud.operations.get_owned(db, operation_id, user_id)

    return {"operation": operation}


# --- 4. PARTIAL UPDATE ---
@router.put("/{operation_id}", response_model=schemas.OperationEnvelope)
def update_operation(
    operation_id: int,
    changes: schemas.OperationUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        operation = crud.operations.update_owned(db, operation_id, user_id, changes)

    return {"message": "Operation updated", "operation": operation}


# --- 5. DELETE ---
@router.delete("/{operation_id}", response_model=schemas.OperationEnvelope)
def delete_operation(
    operation_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        operation = crud.operations.delete_owned(db, operation_id, user_id)

    return {"message": "Operation deleted", "operation": operation}
