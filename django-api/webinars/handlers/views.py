"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging
from typing import Any

from django.conf import settings
from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authentication import BearerTokenAuthentication, GuestTokenAuthentication
from accounts.roles import UserRole
from accounts.tokens import GUEST
from webinars.adapters import DjangoNotifier, JwtTokenIssuer
from webinars.domain import CreditPool, Requester, UserId
from webinars.domain.errors import DomainError, ErrorCode
from webinars.handlers.permissions import IsAdminRole, IsSuperAdmin
from webinars.handlers.serializers import (
    AccountSerializer,
    AddAttendeeSerializer,
    AttendeeRecordSerializer,
    CatalogWebinarSerializer,
    CreditTopUpSerializer,
    ProofSerializer,
    PublicRegisterSerializer,
    RegisterSerializer,
    ResourcesSerializer,
    ResourceSerializer,
    SlotsSerializer,
    WebinarSerializer,
    WebinarWriteSerializer,
)
from webinars.services.credit_ledger import CreditLedger
from webinars.services.registration_service import RegistrationService, parse_user_id
from webinars.services.webinar_service import WebinarService
from webinars.stores.django_store import DjangoUserStore, DjangoWebinarStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBINAR_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_USER_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TIME_SLOTS_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PHONE_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CREDIT_NOT_APPLICABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_CREDIT: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.WEBINAR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_CONFIRMED: status.HTTP_409_CONFLICT,
    ErrorCode.USER_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.HAS_ATTENDEES: status.HTTP_409_CONFLICT,
}


def webinar_service() -> WebinarService:
    return WebinarService(DjangoWebinarStore(), DjangoUserStore(), clock=timezone.localtime)


def registration_service() -> RegistrationService:
    users = DjangoUserStore()
    return RegistrationService(
        webinars=DjangoWebinarStore(),
        users=users,
        ledger=CreditLedger(users),
        notifier=DjangoNotifier(),
        tokens=JwtTokenIssuer(),
        clock=timezone.now,
        newsletter_group=settings.PHARMIA_NEWSLETTER_GROUP,
    )


def _is_guest(request: Request) -> bool:
    return isinstance(request.auth, dict) and request.auth.get("kind") == GUEST


def _requester(request: Request) -> Requester | None:
    user = request.user
    if user is None or not user.is_authenticated:
        return None
    role = UserRole.VISITEUR if _is_guest(request) else UserRole(user.role)
    return Requester(user_id=UserId(value=user.id), role=role)


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            return message if key == "non_field_errors" else f"{key}: {message}"
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    return str(detail)


def error_response(error: DomainError) -> Response:
    return Response(
        {"message": error.message, "code": error.code.value},
        status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


class WebinarAPIView(APIView):
    """Base view translating domain and framework errors into {message, code}."""

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            return error_response(exc)
        if isinstance(exc, exceptions.APIException):
            response = super().handle_exception(exc)
            code = "VALIDATION_ERROR" if isinstance(exc, exceptions.ValidationError) else exc.default_code.upper()
            response.data = {"message": _first_message(exc.detail), "code": code}
            return response
        logger.exception("Unhandled error in %s", type(self).__name__)
        return Response(
            {"message": "Une erreur interne est survenue.", "code": "INTERNAL_ERROR"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# ----------------------------------------------------------------------
# Catalog
# ----------------------------------------------------------------------


class WebinarListView(WebinarAPIView):
    """Handler for GET/POST /api/webinars"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [AllowAny()]

    def get(self, request: Request) -> Response:
        views = webinar_service().list_webinars(_requester(request), request.query_params.get("group"))
        return Response(WebinarSerializer(views, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = WebinarWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = webinar_service()
        webinar = service.create_webinar(serializer.to_draft())
        view = service.project(webinar, _requester(request), timezone.localtime())
        return Response(WebinarSerializer(view).data, status=status.HTTP_201_CREATED)


class MyWebinarsView(WebinarAPIView):
    """Handler for GET /api/webinars/my-webinars"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        views = webinar_service().my_webinars(_requester(request))
        return Response(WebinarSerializer(views, many=True).data)


class WebinarCatalogView(WebinarAPIView):
    """Handler for POST /api/webinars/by-ids"""

    def post(self, request: Request) -> Response:
        ids = request.data.get("ids") if isinstance(request.data, dict) else None
        if not isinstance(ids, list):
            raise exceptions.ValidationError({"ids": ["Une liste d'identifiants est requise."]})
        views = webinar_service().get_catalog(ids)
        return Response(CatalogWebinarSerializer(views, many=True).data)


class WebinarDetailView(WebinarAPIView):
    """Handler for GET/PUT/DELETE /api/webinars/{webinar_id}"""

    def get_permissions(self):
        if self.request.method in ("PUT", "DELETE"):
            return [IsAdminRole()]
        return [AllowAny()]

    def get(self, request: Request, webinar_id: str) -> Response:
        view = webinar_service().get_webinar(webinar_id, _requester(request))
        return Response(WebinarSerializer(view).data)

    def put(self, request: Request, webinar_id: str) -> Response:
        serializer = WebinarWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        service = webinar_service()
        service.update_webinar(webinar_id, serializer.to_changes())
        view = service.get_webinar(webinar_id, _requester(request))
        return Response(WebinarSerializer(view).data)

    def delete(self, request: Request, webinar_id: str) -> Response:
        force = request.query_params.get("force", "").lower() in ("1", "true", "yes")
        webinar_service().delete_webinar(webinar_id, force=force)
        return Response(status=status.HTTP_204_NO_CONTENT)


class WebinarResourcesView(WebinarAPIView):
    """Handler for PUT /api/webinars/{webinar_id}/resources"""

    permission_classes = [IsAdminRole]

    def put(self, request: Request, webinar_id: str) -> Response:
        serializer = ResourcesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        webinar = webinar_service().update_resources(
            webinar_id, _requester(request), serializer.validated_data["resources"]
        )
        return Response({"resources": ResourceSerializer(webinar.resources, many=True).data})


# ----------------------------------------------------------------------
# Registration
# ----------------------------------------------------------------------


class RegisterView(WebinarAPIView):
    """Handler for POST /api/webinars/{webinar_id}/register"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, webinar_id: str) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = registration_service().register(
            webinar_id,
            _requester(request),
            serializer.validated_data.get("timeSlots"),
            use_credit=serializer.validated_data["useCredit"],
        )
        return Response(
            {
                "message": "Inscription enregistrée.",
                "attendee": AttendeeRecordSerializer(result.attendee).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PublicRegisterView(WebinarAPIView):
    """Handler for POST /api/webinars/{webinar_id}/public-register"""

    permission_classes = [AllowAny]

    def post(self, request: Request, webinar_id: str) -> Response:
        serializer = PublicRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = registration_service().public_register(
            webinar_id,
            first_name=data["firstName"],
            last_name=data["lastName"],
            email=data["email"],
            time_slots=data.get("timeSlots"),
            phone=data["phone"],
        )
        body: dict[str, Any] = {
            "message": "Inscription enregistrée.",
            "attendee": AttendeeRecordSerializer(result.attendee).data,
        }
        if result.account is not None:
            body["user"] = AccountSerializer(result.account).data
        else:
            body["message"] = "Inscription enregistrée. Connectez-vous pour soumettre votre preuve de paiement."
        if result.session_token:
            body["token"] = result.session_token
        if result.guest_token:
            body["guestToken"] = result.guest_token
        return Response(body, status=status.HTTP_201_CREATED)


class SubmitPaymentView(WebinarAPIView):
    """Handler for POST /api/webinars/{webinar_id}/submit-payment

    Also accepts the guest token issued by paid public registration, for the
    webinar it was issued for.
    """

    authentication_classes = [BearerTokenAuthentication, GuestTokenAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request: Request, webinar_id: str) -> Response:
        if _is_guest(request) and request.auth.get("webinar_id") != webinar_id:
            raise exceptions.PermissionDenied("Ce jeton ne concerne pas ce webinaire.")
        serializer = ProofSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration_service().submit_payment(webinar_id, _requester(request), serializer.validated_data["proofUrl"])
        return Response({"message": "Preuve de paiement soumise."})


# ----------------------------------------------------------------------
# Attendee administration
# ----------------------------------------------------------------------


class AttendeeListView(WebinarAPIView):
    """Handler for POST /api/webinars/{webinar_id}/attendees"""

    permission_classes = [IsAdminRole]

    def post(self, request: Request, webinar_id: str) -> Response:
        serializer = AddAttendeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attendee = registration_service().add_attendee(
            webinar_id,
            serializer.validated_data["userId"],
            serializer.validated_data.get("timeSlots"),
        )
        return Response(AttendeeRecordSerializer(attendee).data, status=status.HTTP_201_CREATED)


class AttendeeDetailView(WebinarAPIView):
    """Handler for DELETE /api/webinars/{webinar_id}/attendees/{user_id}"""

    permission_classes = [IsSuperAdmin]

    def delete(self, request: Request, webinar_id: str, user_id: str) -> Response:
        registration_service().remove_attendee(webinar_id, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ConfirmPaymentView(WebinarAPIView):
    """Handler for POST /api/webinars/{webinar_id}/attendees/{user_id}/confirm"""

    permission_classes = [IsAdminRole]

    def post(self, request: Request, webinar_id: str, user_id: str) -> Response:
        registration_service().confirm_payment(webinar_id, user_id)
        return Response({"message": "Paiement confirmé."})


class PaymentProofView(WebinarAPIView):
    """Handler for PUT /api/webinars/{webinar_id}/attendees/{user_id}/payment-proof"""

    permission_classes = [IsAdminRole]

    def put(self, request: Request, webinar_id: str, user_id: str) -> Response:
        serializer = ProofSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration_service().override_proof(webinar_id, user_id, serializer.validated_data["proofUrl"])
        return Response({"message": "Preuve de paiement mise à jour."})


class AttendeeSlotsView(WebinarAPIView):
    """Handler for PUT /api/webinars/{webinar_id}/attendees/{user_id}/slots"""

    permission_classes = [IsAuthenticated]

    def put(self, request: Request, webinar_id: str, user_id: str) -> Response:
        serializer = SlotsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration_service().update_slots(
            webinar_id, user_id, _requester(request), serializer.validated_data.get("newSlots")
        )
        return Response({"message": "Créneaux mis à jour."})


# ----------------------------------------------------------------------
# Credits
# ----------------------------------------------------------------------


class CreditTopUpView(WebinarAPIView):
    """Handler for POST /api/credits/{user_id}"""

    permission_classes = [IsAdminRole]

    def post(self, request: Request, user_id: str) -> Response:
        serializer = CreditTopUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        uid = parse_user_id(user_id)
        users = DjangoUserStore()
        CreditLedger(users).credit(
            uid, CreditPool(serializer.validated_data["pool"]), serializer.validated_data["amount"]
        )
        return Response({"user": AccountSerializer(users.get_user(uid)).data})
