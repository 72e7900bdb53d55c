"""User tests — atomic registration, first-login credential, administration."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from leavedesk.auth.service import authenticate, verify_credential
from leavedesk.common.constants import GenderType, UserRole
from leavedesk.common.exceptions import ConflictError, NotFoundException, ValidationException
from leavedesk.users.models import User
from leavedesk.users.schemas import UserRegister, UserUpdate
from leavedesk.users.service import UserService
from tests.conftest import seed_user


def _register_payload(**overrides) -> UserRegister:
    data = dict(
        name="Nia Newhire",
        email="nia@example.com",
        organization="ORG1",
        gender=GenderType.female,
    )
    data.update(overrides)
    return UserRegister(**data)


async def _count_with_email(db, email: str) -> int:
    result = await db.execute(select(func.count()).select_from(User).where(User.email == email))
    return result.scalar_one()


# ── Registration ────────────────────────────────────────────────────


class TestRegisterUser:

    async def test_defaults_to_normal_role(self, db):
        user = await UserService.register_user(db, _register_payload())

        assert user.role == UserRole.normal
        assert user.password_hash is None
        assert user.supervisor_id is None

    async def test_duplicate_email_is_a_conflict_without_partial_record(self, db):
        await UserService.register_user(db, _register_payload())
        await db.commit()

        with pytest.raises(ConflictError):
            await UserService.register_user(db, _register_payload(name="Someone Else"))

        assert await _count_with_email(db, "nia@example.com") == 1

    async def test_unique_index_blocks_duplicate_that_passed_the_check(self, db):
        await seed_user(db, name="First Nia", email="nia@example.com")

        # A concurrent registration that checked before the first insert committed
        with patch.object(UserService, "_email_taken", new=AsyncMock(return_value=False)):
            with pytest.raises(ConflictError):
                await UserService.register_user(db, _register_payload())

        assert await _count_with_email(db, "nia@example.com") == 1
        again = await UserService.register_user(db, _register_payload(email="nia.2@example.com"))
        assert again.email == "nia.2@example.com"

    async def test_supervisor_must_exist(self, db):
        with pytest.raises(NotFoundException):
            await UserService.register_user(db, _register_payload(supervisor=uuid.uuid4()))

        assert await _count_with_email(db, "nia@example.com") == 0

    async def test_supervisor_is_linked(self, db, supervisor):
        user = await UserService.register_user(db, _register_payload(supervisor=supervisor.id))
        assert user.supervisor_id == supervisor.id


# ── Login ───────────────────────────────────────────────────────────


class TestAuthenticate:

    async def test_first_login_stores_credential(self, db, employee):
        user = await authenticate(db, employee.email, "firebase-uid-123")

        assert user.id == employee.id
        assert user.password_hash is not None
        assert verify_credential("firebase-uid-123", user.password_hash)
        assert user.last_login is not None

    async def test_later_login_with_other_uid_fails(self, db, employee):
        await authenticate(db, employee.email, "firebase-uid-123")

        with pytest.raises(ValidationException):
            await authenticate(db, employee.email, "someone-elses-uid")

    async def test_unknown_email_fails(self, db):
        with pytest.raises(ValidationException):
            await authenticate(db, "ghost@example.com", "uid")


# ── Administration ──────────────────────────────────────────────────


class TestAdministration:

    async def test_update_role(self, db, employee):
        user = await UserService.update_role(db, employee.id, UserRole.supervisor)
        assert user.role == UserRole.supervisor

    async def test_assign_supervisor(self, db, employee):
        boss = await seed_user(db, name="New Boss", role=UserRole.supervisor)

        user = await UserService.assign_supervisor(db, employee.id, boss.id)

        assert user.supervisor_id == boss.id

    async def test_assign_unknown_supervisor_raises_not_found(self, db, employee):
        with pytest.raises(NotFoundException):
            await UserService.assign_supervisor(db, employee.id, uuid.uuid4())

    async def test_update_organization(self, db, employee):
        user = await UserService.update_organization(db, employee.id, "ORG2")
        assert user.organization == "ORG2"

    async def test_partial_update_leaves_other_fields(self, db, employee):
        user = await UserService.update_user(db, employee.id, UserUpdate(name="Eve Renamed"))

        assert user.name == "Eve Renamed"
        assert user.email == "eve@example.com"
        assert user.role == UserRole.normal

    async def test_search_is_case_insensitive(self, db, employee, supervisor):
        results = await UserService.search_by_name(db, "eve")
        assert [u.id for u in results] == [employee.id]

    async def test_search_treats_wildcards_literally(self, db, employee, supervisor):
        assert await UserService.search_by_name(db, "%") == []
        assert await UserService.search_by_name(db, "_") == []

        odd = await seed_user(db, name="Ann 100% Sure")
        results = await UserService.search_by_name(db, "0%")
        assert [u.id for u in results] == [odd.id]

    async def test_delete_user(self, db):
        user = await seed_user(db, name="Short Stay")

        await UserService.delete_user(db, user.id)

        with pytest.raises(NotFoundException):
            await UserService.get_user(db, user.id)
