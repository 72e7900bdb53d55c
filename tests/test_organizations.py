"""Organization tests — bulk create and leave type definitions."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from leavedesk.common.exceptions import ConflictError, NotFoundException, ValidationException
from leavedesk.organizations.models import Organization
from leavedesk.organizations.schemas import LeaveTypeIn, OrganizationCreate
from leavedesk.organizations.service import OrganizationService
from tests.conftest import seed_organization


async def _org_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(Organization))
    return result.scalar_one()


class TestCreateOrganizations:

    async def test_bulk_create_generates_missing_ids(self, db):
        payload = [
            OrganizationCreate(
                organization_id="ORG1",
                leave_types=[LeaveTypeIn(leave_type_name="Annual", number_of_days_allowed=10)],
            ),
            OrganizationCreate(),
        ]

        created = await OrganizationService.create_organizations(db, payload)

        assert [org.organization_id for org in created][0] == "ORG1"
        assert created[1].organization_id
        assert created[0].leave_types[0]["leave_type_id"]
        assert created[1].leave_types == []

    async def test_existing_id_rolls_back_whole_batch(self, db):
        await seed_organization(db, "ORG1")

        with pytest.raises(ConflictError):
            await OrganizationService.create_organizations(
                db, [OrganizationCreate(organization_id="ORG9"), OrganizationCreate(organization_id="ORG1")],
            )

        assert await _org_count(db) == 1

    async def test_duplicate_ids_in_payload_conflict(self, db):
        with pytest.raises(ConflictError):
            await OrganizationService.create_organizations(
                db, [OrganizationCreate(organization_id="ORG5"), OrganizationCreate(organization_id="ORG5")],
            )

    def test_duplicate_leave_type_names_are_invalid(self):
        with pytest.raises(ValidationError):
            OrganizationCreate(leave_types=[
                LeaveTypeIn(leave_type_name="Annual", number_of_days_allowed=10),
                LeaveTypeIn(leave_type_name="Annual", number_of_days_allowed=5),
            ])


class TestLeaveTypes:

    async def test_names_in_definition_order(self, db):
        await seed_organization(db, "ORG1", [("Sick", 5), ("Annual", 10), ("Parental", 90)])

        assert await OrganizationService.leave_type_names(db, "ORG1") == ["Sick", "Annual", "Parental"]

    async def test_empty_organization_has_no_names(self, db):
        await seed_organization(db, "ORG2", [])
        assert await OrganizationService.leave_type_names(db, "ORG2") == []

    async def test_unknown_organization_raises_not_found(self, db):
        with pytest.raises(NotFoundException):
            await OrganizationService.leave_type_names(db, "NOPE")

    async def test_add_leave_type_appends(self, db):
        await seed_organization(db, "ORG1", [("Annual", 10)])

        org = await OrganizationService.add_leave_type(
            db, "ORG1", LeaveTypeIn(leave_type_name="Study", number_of_days_allowed=3),
        )
        await db.commit()

        assert org.leave_type_names() == ["Annual", "Study"]
        assert await OrganizationService.leave_type_names(db, "ORG1") == ["Annual", "Study"]

    async def test_add_existing_name_is_invalid(self, db):
        await seed_organization(db, "ORG1", [("Annual", 10)])

        with pytest.raises(ValidationException):
            await OrganizationService.add_leave_type(
                db, "ORG1", LeaveTypeIn(leave_type_name="Annual", number_of_days_allowed=3),
            )

    async def test_delete_organization(self, db):
        await seed_organization(db, "ORG1")

        await OrganizationService.delete_organization(db, "ORG1")

        assert await _org_count(db) == 0
