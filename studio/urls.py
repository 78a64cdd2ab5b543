from django.urls import path

from studio.handlers import (
    AttendanceView,
    ClassDetailView,
    ClassListView,
    ClassNotesView,
    CurrentTicketView,
    ParticipantListView,
    PassView,
    SalesSyncView,
    UserDetailView,
    UserListView,
)

urlpatterns = [
    path("classes", ClassListView.as_view(), name="class-list"),
    path("classes/<str:class_id>", ClassDetailView.as_view(), name="class-detail"),
    path("classes/<str:class_id>/notes", ClassNotesView.as_view(), name="class-notes"),
    path(
        "classes/<str:class_id>/participants",
        ParticipantListView.as_view(),
        name="participant-list",
    ),
    path(
        "classes/<str:class_id>/participants/<str:user_id>/attendance",
        AttendanceView.as_view(),
        name="participant-attendance",
    ),
    path(
        "classes/<str:class_id>/participants/<str:user_id>/pass",
        PassView.as_view(),
        name="participant-pass",
    ),
    path("users", UserListView.as_view(), name="user-list"),
    path("users/<str:user_id>", UserDetailView.as_view(), name="user-detail"),
    path(
        "users/<str:user_id>/current-ticket",
        CurrentTicketView.as_view(),
        name="user-current-ticket",
    ),
    path("sales/sync", SalesSyncView.as_view(), name="sales-sync"),
]
