from __future__ import annotations

import logging
from typing import Iterable, Optional
from uuid import UUID

from sqlmodel import Session

from ..core.errors import DuplicateUserError, UserInUseError, UserNotFoundError
from ..models import (
    GrantsUpdate,
    Operation,
    OperationGrantModel,
    OperationGrantResponse,
    UserCreate,
    UserModel,
    UserResponse,
    UserRole,
    UserUpdate,
)
from .repository import LedgerRepository


logger = logging.getLogger(__name__)


class StaffService:
    """Staff directory and the per-employee operation grants."""

    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)

    def _user_to_response(self, user: UserModel) -> UserResponse:
        return UserResponse(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            created_at=user.created_at,
        )

    def _grant_to_response(self, grant: OperationGrantModel) -> OperationGrantResponse:
        return OperationGrantResponse(
            employee_id=grant.employee_id,
            operation=grant.operation,
            allowed=grant.allowed,
            granted_by=grant.granted_by,
        )

    def find_user(self, user_id: UUID) -> Optional[UserModel]:
        return self.repository.get_user(user_id)

    def create_user(self, payload: UserCreate) -> UserResponse:
        email = payload.email.strip().lower()
        if self.repository.get_user_by_email(email) is not None:
            raise DuplicateUserError("User already exists")

        user = self.repository.add_user(
            name=payload.name,
            email=email,
            role=payload.role,
            phone=payload.phone,
        )
        self.session.commit()
        self.session.refresh(user)
        logger.info(
            "user.created",
            extra={"user_id": str(user.id), "role": user.role.value},
        )
        return self._user_to_response(user)

    def list_users(self) -> list[UserResponse]:
        return [self._user_to_response(user) for user in self.repository.list_users()]

    def _get_user(self, user_id: UUID) -> UserModel:
        user = self.repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        return user

    def profile(self, user: UserModel) -> UserResponse:
        return self._user_to_response(user)

    def update_user(self, user_id: UUID, payload: UserUpdate) -> UserResponse:
        user = self._get_user(user_id)
        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            existing = self.repository.get_user_by_email(changes["email"])
            if existing is not None and existing.id != user.id:
                raise DuplicateUserError("User already exists")

        user = self.repository.update_user(user, changes)
        self.session.commit()
        self.session.refresh(user)
        logger.info(
            "user.updated",
            extra={"user_id": str(user.id), "fields": sorted(changes)},
        )
        return self._user_to_response(user)

    def delete_user(self, user_id: UUID, deleted_by: UUID) -> None:
        if user_id == deleted_by:
            raise ValueError("Cannot delete your own account")
        user = self._get_user(user_id)
        # Borrowing rows keep pointing at the employee; history must stay joinable.
        if self.repository.has_transactions_for(user_id):
            raise UserInUseError("User is referenced by banking transactions")

        self.repository.delete_user(user)
        self.session.commit()
        logger.info(
            "user.deleted",
            extra={"user_id": str(user_id), "deleted_by": str(deleted_by)},
        )

    def set_grants(
        self,
        employee_id: UUID,
        payload: GrantsUpdate,
        granted_by: UUID,
    ) -> list[OperationGrantResponse]:
        employee = self.repository.get_user(employee_id)
        if employee is None or employee.role != UserRole.EMPLOYEE:
            raise ValueError("Invalid employee ID")

        # Later entries for the same operation win.
        grants = {item.operation: item.allowed for item in payload.operations}
        rows = self.repository.replace_grants(employee_id, grants, granted_by)
        response = [self._grant_to_response(row) for row in rows]
        self.session.commit()
        logger.info(
            "permissions.updated",
            extra={
                "employee_id": str(employee_id),
                "granted_by": str(granted_by),
                "allowed": sorted(op.value for op, allowed in grants.items() if allowed),
            },
        )
        return response

    def list_grants(self) -> list[OperationGrantResponse]:
        return [self._grant_to_response(grant) for grant in self.repository.list_grants()]

    def is_allowed(self, user: UserModel, operations: Iterable[Operation]) -> bool:
        if user.role == UserRole.ADMIN:
            return True
        return self.repository.has_allowed_grant(user.id, operations)
