# planora_core/conftest.py
import datetime as dt

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from planora_core.businesses.models import Business, BusinessStatus
from planora_core.iam.models import BusinessRole, UserBusiness, UserProfile, UserRole
from planora_core.iam.services.membership import default_permissions_for


def business_headers(business):
    """DRF test client requires the HTTP_ prefix."""
    return {"HTTP_X_BUSINESS_ID": str(business.id)}


def make_user(username, *, role=UserRole.CLIENT, business=None, business_role=None, is_active=True):
    """
    auth_user -> UserProfile (platform role) -> optional UserBusiness association.
    """
    User = get_user_model()
    user = User.objects.create_user(username=username, email=f"{username}@example.com", password="Pass@12345")
    UserProfile.objects.create(user=user, role=role)

    if business is not None:
        assoc_role = business_role or {
            UserRole.ADMIN: BusinessRole.ADMIN,
            UserRole.EMPLOYEE: BusinessRole.EMPLOYEE,
        }.get(role, BusinessRole.CLIENT)
        UserBusiness.objects.create(
            user=user,
            business=business,
            role=assoc_role,
            is_active=is_active,
            **default_permissions_for(assoc_role),
        )
    return user


def jwt_client(user, business=None):
    """
    Real bearer token so BusinessContextJWTAuthentication runs
    (force_authenticate would bypass the gate).
    """
    from planora_core.iam.tokens import issue_tokens_for

    c = APIClient()
    c.credentials(
        HTTP_AUTHORIZATION=f"Bearer {issue_tokens_for(user)['access']}",
        **(business_headers(business) if business is not None else {}),
    )
    return c


@pytest.fixture
def business(db):
    return Business.objects.create(
        name="Riverside Swim School",
        email="office@riverside.example.com",
        business_type="swim-school",
        status=BusinessStatus.ACTIVE,
    )


@pytest.fixture
def other_business(db):
    return Business.objects.create(
        name="Hilltop Tennis",
        email="hello@hilltop.example.com",
        business_type="tennis",
        status=BusinessStatus.ACTIVE,
    )


@pytest.fixture
def super_admin(db):
    return make_user("root", role=UserRole.SUPER_ADMIN)


@pytest.fixture
def admin_user(business):
    return make_user("admin", role=UserRole.ADMIN, business=business)


@pytest.fixture
def employee_user(business):
    return make_user("coach", role=UserRole.EMPLOYEE, business=business)


@pytest.fixture
def instructor(business, employee_user):
    from planora_core.employees.models import Employee, EmployeeStatus

    return Employee.objects.create(
        business=business,
        user=employee_user,
        first_name="Casey",
        last_name="Coach",
        status=EmployeeStatus.APPROVED,
    )


@pytest.fixture
def client_user(business):
    return make_user("parent", role=UserRole.CLIENT, business=business)


@pytest.fixture
def other_client_user(business):
    return make_user("neighbour", role=UserRole.CLIENT, business=business)


def _primary_client(business, user, first_name, last_name):
    from planora_core.clients.models import Client, Relationship

    return Client.objects.create(
        business=business,
        user=user,
        is_primary=True,
        relationship=Relationship.SELF,
        first_name=first_name,
        last_name=last_name,
        phone="555-0100",
        emergency_contact={"name": "Pat", "phone": "555-0199"},
        address={"city": "Springfield"},
    )


@pytest.fixture
def client_record(business, client_user):
    return _primary_client(business, client_user, "Alex", "Parent")


@pytest.fixture
def other_client_record(business, other_client_user):
    return _primary_client(business, other_client_user, "Sam", "Neighbour")


@pytest.fixture
def make_clients(business):
    """Factory: n extra clients, each with its own login."""
    counter = {"n": 0}

    def _make(n):
        out = []
        for _ in range(n):
            counter["n"] += 1
            user = make_user(f"extra{counter['n']}", business=business)
            out.append(_primary_client(business, user, f"Extra{counter['n']}", "Client"))
        return out

    return _make


@pytest.fixture
def class_offering(business, instructor):
    from planora_core.classes.models import ClassOffering

    return ClassOffering.objects.create(
        business=business,
        instructor=instructor,
        title="Beginner Freestyle",
        max_capacity=2,
        duration_minutes=30,
    )


@pytest.fixture
def session(business, class_offering, instructor):
    from planora_core.scheduling.models import Session

    return Session.objects.create(
        business=business,
        class_offering=class_offering,
        instructor=instructor,
        date=timezone.localdate() + dt.timedelta(days=3),
        start_time=dt.time(9, 0),
        end_time=dt.time(9, 30),
    )


@pytest.fixture
def identity_for():
    from planora_core.iam.context import resolve_identity_context

    def _resolve(user, business=None):
        return resolve_identity_context(user, requested_business_id=business.id if business is not None else None)

    return _resolve


@pytest.fixture
def api_client(admin_user, business):
    return jwt_client(admin_user, business)
