import pytest
from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command

from planora_core.iam.models import UserProfile, UserRole

pytestmark = pytest.mark.django_db


def test_creates_super_admin_once():
    call_command("ensure_super_admin", email="Root@Example.com", password="S3cret!pass")
    call_command("ensure_super_admin", email="root@example.com")

    users = get_user_model().objects.filter(email="root@example.com")
    assert users.count() == 1
    user = users.get()
    assert user.is_superuser and user.is_staff
    assert UserProfile.objects.get(user=user).role == UserRole.SUPER_ADMIN


def test_requires_password_to_create():
    with pytest.raises(CommandError):
        call_command("ensure_super_admin", email="nobody@example.com", password=None)
