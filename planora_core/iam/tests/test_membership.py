import pytest
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.common.api.exceptions import ConflictError
from planora_core.conftest import jwt_client, make_user
from planora_core.iam.models import BusinessRole, ClientStatus, UserBusiness, UserProfile
from planora_core.iam.services import membership

pytestmark = pytest.mark.django_db


def test_client_join_starts_pending_staff_starts_active(business):
    joiner = make_user("joiner")
    coach = make_user("coach2")

    pending = membership.add_user_to_business(user_id=joiner.id, business_id=business.id, role=BusinessRole.CLIENT)
    active = membership.add_user_to_business(user_id=coach.id, business_id=business.id, role=BusinessRole.INSTRUCTOR)

    assert pending.is_active is False
    assert active.is_active is True
    assert active.can_manage_sessions is True
    assert active.can_manage_clients is False


def test_adding_active_member_again_conflicts(client_user, business):
    with pytest.raises(ConflictError):
        membership.add_user_to_business(user_id=client_user.id, business_id=business.id, role=BusinessRole.CLIENT)


def test_remove_then_readd_reuses_the_row(client_user, business):
    membership.remove_user_from_business(user_id=client_user.id, business_id=business.id)
    ub = membership.add_user_to_business(
        user_id=client_user.id, business_id=business.id, role=BusinessRole.CLIENT, is_active=True
    )

    assert ub.is_active is True
    assert UserBusiness.objects.filter(user=client_user, business=business).count() == 1


def test_readding_former_admin_as_client_drops_admin_permissions(admin_user, business):
    membership.remove_user_from_business(user_id=admin_user.id, business_id=business.id)
    ub = membership.add_user_to_business(
        user_id=admin_user.id, business_id=business.id, role=BusinessRole.CLIENT, is_active=True
    )

    ub.refresh_from_db()
    assert ub.role == BusinessRole.CLIENT
    assert ub.can_manage_clients is False
    assert ub.can_view_reports is False
    assert not any(ub.permissions.values())


def test_remove_clears_current_business_pointer(client_user, business):
    UserProfile.objects.filter(user=client_user).update(current_business=business)

    membership.remove_user_from_business(user_id=client_user.id, business_id=business.id)

    assert UserProfile.objects.get(user=client_user).current_business_id is None
    assert not membership.is_active_member(user_id=client_user.id, business_id=business.id)


def test_remove_without_active_association_is_404(client_user, other_business):
    with pytest.raises(NotFound):
        membership.remove_user_from_business(user_id=client_user.id, business_id=other_business.id)


def test_switch_to_foreign_business_is_forbidden(client_user, other_business):
    with pytest.raises(PermissionDenied):
        membership.switch_user_business(user_id=client_user.id, business_id=other_business.id)


def test_update_role_rederives_permissions(employee_user, business):
    ub = membership.update_user_role_in_business(
        user_id=employee_user.id, business_id=business.id, role=BusinessRole.ADMIN
    )
    assert ub.role == BusinessRole.ADMIN
    assert all(ub.permissions.values())


def test_unknown_role_is_rejected(employee_user, business):
    with pytest.raises(ValidationError):
        membership.update_user_role_in_business(user_id=employee_user.id, business_id=business.id, role="owner")


def test_approve_join_request_approves_client_status(business):
    joiner = make_user("joiner", business=business, is_active=False)

    ub = membership.approve_join_request(business_id=business.id, user_id=joiner.id)

    assert ub.is_active is True
    assert UserProfile.objects.get(user=joiner).client_status == ClientStatus.APPROVED


def test_reject_join_request_deletes_pending_row(business):
    joiner = make_user("joiner", business=business, is_active=False)

    membership.reject_join_request(business_id=business.id, user_id=joiner.id)

    assert not UserBusiness.objects.filter(user=joiner, business=business).exists()
    with pytest.raises(NotFound):
        membership.reject_join_request(business_id=business.id, user_id=joiner.id)


def test_suspending_client_deactivates_association(client_user, business):
    result = membership.set_client_status(
        business_id=business.id, user_id=client_user.id, status=ClientStatus.SUSPENDED
    )
    assert result["business_access"] is False

    result = membership.set_client_status(
        business_id=business.id, user_id=client_user.id, status=ClientStatus.APPROVED
    )
    assert result["business_access"] is True
    assert UserProfile.objects.get(user=client_user).client_status == ClientStatus.APPROVED


def test_list_user_businesses_only_active(client_user, business, other_business):
    membership.add_user_to_business(user_id=client_user.id, business_id=other_business.id, role=BusinessRole.CLIENT)

    items = membership.list_user_businesses(client_user.id)
    assert [i["business_id"] for i in items] == [str(business.id)]


# ---------------------------------------------------------------------
# API
# ---------------------------------------------------------------------
def test_admin_lists_and_approves_pending_requests(admin_user, business):
    joiner = make_user("joiner", business=business, is_active=False)
    c = jwt_client(admin_user, business)

    res = c.get("/api/v1/business-users/pending/")
    assert res.status_code == 200
    assert [row["user_id"] for row in res.json()] == [joiner.id]

    res = c.post(f"/api/v1/business-users/{joiner.id}/approve/", {}, format="json")
    assert res.status_code == 200
    assert res.json()["is_active"] is True


def test_employee_cannot_approve_requests(employee_user, business):
    joiner = make_user("joiner", business=business, is_active=False)
    res = jwt_client(employee_user, business).post(f"/api/v1/business-users/{joiner.id}/approve/", {}, format="json")
    assert res.status_code == 403
