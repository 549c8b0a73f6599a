from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlmodel import Session

from ..models import Operation, UserModel, UserRole
from ..services import LedgerRepository, LedgerService, StaffService
from .db import get_session
from .errors import AuthenticationError, PermissionDeniedError

def get_ledger_service(session: Session = Depends(get_session)) -> LedgerService:
    repository = LedgerRepository(session)
    return LedgerService(session, repository)

def get_staff_service(session: Session = Depends(get_session)) -> StaffService:
    repository = LedgerRepository(session)
    return StaffService(session, repository)

def get_current_user(
    caller_id: Optional[str] = Header(default=None, convert_underscores=False, alias="X-User-Id"),
    service: StaffService = Depends(get_staff_service),
) -> UserModel:
    """Resolve the caller forwarded by the authenticating gateway."""
    if not caller_id:
        raise AuthenticationError("No caller identity, authorization denied")
    try:
        parsed = UUID(caller_id)
    except ValueError as exc:
        raise AuthenticationError("Caller identity is not valid") from exc

    user = service.find_user(parsed)
    if user is None:
        raise AuthenticationError("Caller identity is not valid")
    return user

def restrict_to(*roles: UserRole) -> Callable[..., UserModel]:
    def _dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in roles:
            raise PermissionDeniedError("Access denied")
        return user

    return _dependency

def restrict_operation(*operations: Operation) -> Callable[..., UserModel]:
    """Admins pass; employees need an allowed grant for one of ``operations``."""

    def _dependency(
        user: UserModel = Depends(get_current_user),
        service: StaffService = Depends(get_staff_service),
    ) -> UserModel:
        if not service.is_allowed(user, operations):
            names = ", ".join(operation.value for operation in operations)
            raise PermissionDeniedError(f"Not authorized to perform operation(s): {names}")
        return user

    return _dependency
