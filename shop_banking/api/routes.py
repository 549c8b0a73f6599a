from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status

from ..core.dependencies import (
    get_current_user,
    get_ledger_service,
    get_staff_service,
    restrict_operation,
    restrict_to,
)
from ..models import (
    GrantsUpdate,
    LedgerState,
    Operation,
    OperationGrantResponse,
    TransactionRecordResponse,
    TransactionRequest,
    UserCreate,
    UserModel,
    UserResponse,
    UserRole,
    UserUpdate,
)
from ..services import LedgerService, StaffService


router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.post(
    "",
    response_model=TransactionRecordResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(restrict_operation(Operation.BANKING_TRANSACTION))],
)
def create_transaction(
    payload: TransactionRequest,
    service: LedgerService = Depends(get_ledger_service),
    idempotency_key: Optional[str] = Header(
        default=None, convert_underscores=False, alias="Idempotency-Key"
    ),
) -> TransactionRecordResponse:
    return service.record_transaction(payload, idempotency_key)

@router.get(
    "",
    response_model=list[TransactionRecordResponse],
    dependencies=[Depends(restrict_operation(Operation.BANKING_VIEW))],
)
def list_transactions(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    service: LedgerService = Depends(get_ledger_service),
) -> list[TransactionRecordResponse]:
    return service.list_transactions(start=start, end=end)

@router.get(
    "/balance",
    response_model=LedgerState,
    dependencies=[Depends(restrict_operation(Operation.BANKING_VIEW))],
)
def get_balance(service: LedgerService = Depends(get_ledger_service)) -> LedgerState:
    return service.current_balance()

user_router = APIRouter(prefix="/users", tags=["users"])

@user_router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(restrict_to(UserRole.ADMIN))],
)
def create_user(
    payload: UserCreate,
    service: StaffService = Depends(get_staff_service),
) -> UserResponse:
    return service.create_user(payload)

@user_router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(restrict_to(UserRole.ADMIN))],
)
def list_users(service: StaffService = Depends(get_staff_service)) -> list[UserResponse]:
    return service.list_users()

@user_router.get("/profile", response_model=UserResponse)
def get_profile(
    user: UserModel = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
) -> UserResponse:
    return service.profile(user)

@user_router.put(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(restrict_to(UserRole.ADMIN))],
)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    service: StaffService = Depends(get_staff_service),
) -> UserResponse:
    return service.update_user(user_id, payload)

@user_router.delete("/{user_id}", response_model=dict)
def delete_user(
    user_id: UUID,
    admin: UserModel = Depends(restrict_to(UserRole.ADMIN)),
    service: StaffService = Depends(get_staff_service),
) -> dict:
    service.delete_user(user_id, deleted_by=admin.id)
    return {"message": "User deleted"}

permission_router = APIRouter(prefix="/permissions", tags=["permissions"])

@permission_router.put("/{employee_id}", response_model=list[OperationGrantResponse])
def set_permissions(
    employee_id: UUID,
    payload: GrantsUpdate,
    admin: UserModel = Depends(restrict_to(UserRole.ADMIN)),
    service: StaffService = Depends(get_staff_service),
) -> list[OperationGrantResponse]:
    return service.set_grants(employee_id, payload, granted_by=admin.id)

@permission_router.get(
    "",
    response_model=list[OperationGrantResponse],
    dependencies=[Depends(restrict_to(UserRole.ADMIN))],
)
def list_permissions(
    service: StaffService = Depends(get_staff_service),
) -> list[OperationGrantResponse]:
    return service.list_grants()

__all__ = ["router", "user_router", "permission_router"]
