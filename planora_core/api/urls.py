# planora_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from planora_core.businesses.api.views import BusinessViewSet
from planora_core.catchup.api.views import CatchUpViewSet
from planora_core.classes.api.views import ClassOfferingViewSet
from planora_core.clients.api.views import ClientViewSet
from planora_core.employees.api.views import EmployeeViewSet
from planora_core.iam.api.associations import BusinessUserViewSet
from planora_core.iam.api.auth import LoginView, LogoutView, RefreshView
from planora_core.iam.api.me import MeView, SwitchBusinessView
from planora_core.notifications.api.views import NotificationViewSet
from planora_core.scheduling.api.views import SessionViewSet

router = DefaultRouter()

router.register(r"businesses", BusinessViewSet, basename="businesses")
router.register(r"business-users", BusinessUserViewSet, basename="business-users")
router.register(r"employees", EmployeeViewSet, basename="employees")
router.register(r"clients", ClientViewSet, basename="clients")
router.register(r"classes", ClassOfferingViewSet, basename="classes")
router.register(r"sessions", SessionViewSet, basename="sessions")
router.register(r"catch-up", CatchUpViewSet, basename="catch-up")
router.register(r"notifications", NotificationViewSet, basename="notifications")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("me/switch-business/", SwitchBusinessView.as_view(), name="me-switch-business"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
