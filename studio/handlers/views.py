"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging
from datetime import date

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from studio import conf
from studio.domain.errors import DomainError, ErrorCode
from studio.handlers import serializers
from studio.services.attendance_service import AttendanceService
from studio.services.class_service import ClassPeriod, ClassService
from studio.services.ingestion_service import IngestionService, academic_year
from studio.services.user_service import UserService
from studio.stores.django_store import DjangoStudioStore
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CLASS_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CLASS_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PARTICIPANT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NO_CURRENT_TICKET: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENT_UPDATE: status.HTTP_409_CONFLICT,
    ErrorCode.CONSUMPTION_ENTRY_NOT_FOUND: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Store messages carry database details.
HIDDEN_MESSAGES = {
    ErrorCode.STORE_ERROR: "Could not save the changes, reload and try again",
    ErrorCode.CONCURRENT_UPDATE: "The ticket was changed meanwhile, reload and try again",
}


def error_response(error: DomainError) -> Response:
    message = HIDDEN_MESSAGES.get(error.code, error.message)
    return Response(
        {"code": error.code.value, "message": message},
        status=ERROR_STATUS.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


class StudioAPIView(APIView):
    """Base view mapping domain errors to responses."""

    store_class: type[StudioStore] = DjangoStudioStore

    def get_store(self) -> StudioStore:
        return self.store_class()

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.info("%s %s -> %s", self.request.method, self.request.path, exc)
            return error_response(exc)
        return super().handle_exception(exc)

    def attendance_service(self) -> AttendanceService:
        return AttendanceService(self.get_store(), conf.get_ticket_catalog())

    def class_service(self) -> ClassService:
        return ClassService(self.get_store(), conf.get_ticket_catalog())


class ClassListView(StudioAPIView):
    """Handler for GET/POST /api/classes"""

    def get(self, request: Request) -> Response:
        try:
            period = ClassPeriod(request.query_params.get("period", ClassPeriod.ALL.value))
        except ValueError:
            return Response(
                {"code": "INVALID_PERIOD", "message": "Invalid period"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        classes = self.class_service().list_classes(period)
        return Response(serializers.ClassSummarySerializer(classes, many=True).data)

    def post(self, request: Request) -> Response:
        payload = serializers.ClassCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        yoga_class = self.class_service().create_class(**payload.to_command())
        return Response(
            serializers.YogaClassSerializer(yoga_class).data, status=status.HTTP_201_CREATED
        )


class ClassDetailView(StudioAPIView):
    """Handler for GET /api/classes/{class_id}"""

    def get(self, request: Request, class_id: str) -> Response:
        yoga_class = self.class_service().get_class(class_id)
        return Response(serializers.YogaClassSerializer(yoga_class).data)


class ClassNotesView(StudioAPIView):
    """Handler for PATCH /api/classes/{class_id}/notes"""

    def patch(self, request: Request, class_id: str) -> Response:
        payload = serializers.NotesInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        yoga_class = self.class_service().update_notes(class_id, payload.validated_data["notes"])
        return Response(serializers.YogaClassSerializer(yoga_class).data)


class ParticipantListView(StudioAPIView):
    """Handler for POST /api/classes/{class_id}/participants"""

    def post(self, request: Request, class_id: str) -> Response:
        payload = serializers.ParticipantInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        yoga_class = self.class_service().add_participant(
            class_id, payload.validated_data["user_id"]
        )
        return Response(
            serializers.YogaClassSerializer(yoga_class).data, status=status.HTTP_201_CREATED
        )


class AttendanceView(StudioAPIView):
    """Handler for PUT /api/classes/{class_id}/participants/{user_id}/attendance"""

    def put(self, request: Request, class_id: str, user_id: str) -> Response:
        payload = serializers.AttendanceInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = self.attendance_service().set_attendance(
            class_id, user_id, payload.validated_data["attended"]
        )
        return Response(serializers.AttendanceResultSerializer(result).data)


class PassView(StudioAPIView):
    """Handler for PUT /api/classes/{class_id}/participants/{user_id}/pass"""

    def put(self, request: Request, class_id: str, user_id: str) -> Response:
        payload = serializers.PassInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = self.attendance_service().set_pass_missing(
            class_id, user_id, payload.validated_data["missing_class_pass"]
        )
        return Response(serializers.AttendanceResultSerializer(result).data)


class UserListView(StudioAPIView):
    """Handler for GET /api/users?search=..."""

    def get(self, request: Request) -> Response:
        service = UserService(self.get_store())
        query = request.query_params.get("search", "")
        users = service.search_users(query) if query else service.list_users()
        return Response(serializers.UserSummarySerializer(users, many=True).data)


class UserDetailView(StudioAPIView):
    """Handler for GET /api/users/{user_id}"""

    def get(self, request: Request, user_id: str) -> Response:
        user = UserService(self.get_store()).get_user(user_id)
        return Response(serializers.UserSerializer(user).data)


class CurrentTicketView(StudioAPIView):
    """Handler for GET /api/users/{user_id}/current-ticket?class_id=..."""

    def get(self, request: Request, user_id: str) -> Response:
        class_id = request.query_params.get("class_id", "")
        ticket = self.attendance_service().select_ticket(user_id, class_id)
        if ticket is None:
            return Response(
                {"code": ErrorCode.NO_CURRENT_TICKET.value, "message": "No current ticket"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(serializers.OrderSerializer(ticket).data)


class SalesSyncView(StudioAPIView):
    """Handler for GET/POST /api/sales/sync"""

    def get(self, request: Request) -> Response:
        service = IngestionService(self.get_store(), conf.get_ticket_catalog())
        data = {
            "last_updated": service.last_updated(),
            "academic_year": academic_year(date.today(), conf.get_new_academic_year_month()),
        }
        return Response(serializers.SyncStatusSerializer(data).data)

    def post(self, request: Request) -> Response:
        payload = serializers.SaleSerializer(data=request.data, many=True)
        payload.is_valid(raise_exception=True)
        sales = payload.save()
        created = IngestionService(self.get_store(), conf.get_ticket_catalog()).sync_sales(sales)
        return Response({"created_orders": created}, status=status.HTTP_201_CREATED)
