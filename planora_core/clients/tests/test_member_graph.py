import pytest
from rest_framework.exceptions import PermissionDenied, ValidationError

from planora_core.clients.models import Client, Relationship
from planora_core.clients.services import ClientService
from planora_core.common.api.exceptions import ConflictError
from planora_core.conftest import jwt_client, make_user
from planora_core.scheduling.models import SessionEnrollment

pytestmark = pytest.mark.django_db


def _primary_count(user, business):
    return Client.objects.filter(user=user, business=business, is_primary=True).count()


def test_first_client_row_becomes_primary(business):
    user = make_user("newbie", business=business)
    c = ClientService.create_client(business_id=business.id, user_id=user.id, first_name="New", last_name="Bie")

    assert c.is_primary is True
    assert c.relationship == Relationship.SELF


def test_second_row_is_member_and_second_primary_conflicts(client_record, client_user, business):
    member = ClientService.create_client(
        business_id=business.id,
        user_id=client_user.id,
        first_name="Kid",
        last_name="Parent",
        relationship=Relationship.CHILD,
    )
    assert member.is_primary is False

    with pytest.raises(ConflictError):
        ClientService.create_client(
            business_id=business.id, user_id=client_user.id, is_primary=True, first_name="Two", last_name="Heads"
        )
    assert _primary_count(client_user, business) == 1


def test_staff_creation_refuses_existing_client(client_record, client_user, business):
    with pytest.raises(ConflictError):
        ClientService.create_client(
            business_id=business.id,
            user_id=client_user.id,
            created_by_staff=True,
            first_name="Again",
            last_name="Parent",
        )


def test_add_member_inherits_contact_details(client_record, client_user, business):
    member = ClientService.add_member(
        business_id=business.id,
        user_id=client_user.id,
        data={"first_name": "Kid", "last_name": "Parent", "relationship": "child"},
    )

    assert member.is_primary is False
    assert member.added_by_id == client_user.id
    assert member.phone == client_record.phone
    assert member.emergency_contact == client_record.emergency_contact
    assert member.address == client_record.address


def test_add_member_without_client_record_is_forbidden(business):
    stranger = make_user("stranger", business=business)
    with pytest.raises(PermissionDenied):
        ClientService.add_member(business_id=business.id, user_id=stranger.id, data={"first_name": "A", "last_name": "B"})


def test_add_member_promotes_oldest_active_row_when_primary_missing(client_user, business):
    legacy = Client.objects.create(
        business=business, user=client_user, is_primary=False, relationship="other", first_name="Old", last_name="Row"
    )

    ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Row"}
    )

    legacy.refresh_from_db()
    assert legacy.is_primary is True
    assert legacy.relationship == Relationship.SELF
    assert _primary_count(client_user, business) == 1


def test_add_member_reactivates_inactive_row_when_no_active_rows(client_user, business):
    legacy = Client.objects.create(
        business=business,
        user=client_user,
        is_primary=False,
        is_active=False,
        relationship="other",
        first_name="Old",
        last_name="Row",
    )

    ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Row"}
    )

    legacy.refresh_from_db()
    assert legacy.is_primary is True
    assert legacy.is_active is True


def test_update_member_ignores_immutable_fields(client_record, client_user, business):
    member = ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Parent"}
    )

    updated = ClientService.update_member(
        business_id=business.id,
        user_id=client_user.id,
        member_id=member.id,
        data={"first_name": "Kiddo", "is_primary": True, "user_id": 999, "added_by_id": 999},
    )

    assert updated.first_name == "Kiddo"
    assert updated.is_primary is False
    assert updated.user_id == client_user.id
    assert updated.added_by_id == client_user.id
    assert _primary_count(client_user, business) == 1


def test_update_other_accounts_member_is_forbidden(client_record, other_client_user, business):
    with pytest.raises(PermissionDenied):
        ClientService.update_member(
            business_id=business.id,
            user_id=other_client_user.id,
            member_id=client_record.id,
            data={"first_name": "Hijack"},
        )


def test_primary_cannot_be_removed(client_record, client_user, business):
    with pytest.raises(ValidationError):
        ClientService.remove_member(business_id=business.id, user_id=client_user.id, member_id=client_record.id)


def test_member_with_upcoming_session_cannot_be_removed(client_record, client_user, business, session):
    member = ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Parent"}
    )
    SessionEnrollment.objects.create(session=session, client=member)

    with pytest.raises(ValidationError) as excinfo:
        ClientService.remove_member(business_id=business.id, user_id=client_user.id, member_id=member.id)

    assert "active_sessions_count" in excinfo.value.detail
    member.refresh_from_db()
    assert member.is_active is True


def test_member_removal_is_soft(client_record, client_user, business):
    member = ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Parent"}
    )

    ClientService.remove_member(business_id=business.id, user_id=client_user.id, member_id=member.id)

    member.refresh_from_db()
    assert member.is_active is False


# ---------------------------------------------------------------------
# API
# ---------------------------------------------------------------------
def test_members_endpoint_lists_primary_and_members(client_record, client_user, business):
    c = jwt_client(client_user, business)

    res = c.post("/api/v1/clients/members/", {"first_name": "Kid", "last_name": "Parent", "relationship": "child"}, format="json")
    assert res.status_code == 201

    body = c.get("/api/v1/clients/members/").json()
    assert body["primary"]["id"] == str(client_record.id)
    assert [m["first_name"] for m in body["members"]] == ["Kid"]


def test_removing_member_with_sessions_returns_count(client_record, client_user, business, session):
    member = ClientService.add_member(
        business_id=business.id, user_id=client_user.id, data={"first_name": "Kid", "last_name": "Parent"}
    )
    SessionEnrollment.objects.create(session=session, client=member)

    res = jwt_client(client_user, business).delete(f"/api/v1/clients/members/{member.id}/")

    assert res.status_code == 400
    assert res.json()["error"]["details"]["active_sessions_count"] == "1"


def test_client_cannot_read_other_clients(client_record, other_client_record, client_user, business):
    c = jwt_client(client_user, business)
    assert c.get(f"/api/v1/clients/{client_record.id}/").status_code == 200
    assert c.get(f"/api/v1/clients/{other_client_record.id}/").status_code == 404
