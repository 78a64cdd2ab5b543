from studio.handlers.views import (
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

__all__ = [
    "AttendanceView",
    "ClassDetailView",
    "ClassListView",
    "ClassNotesView",
    "CurrentTicketView",
    "ParticipantListView",
    "PassView",
    "SalesSyncView",
    "UserDetailView",
    "UserListView",
]
