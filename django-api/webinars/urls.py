from django.urls import path

from webinars.handlers import (
    AttendeeDetailView,
    AttendeeListView,
    AttendeeSlotsView,
    ConfirmPaymentView,
    CreditTopUpView,
    MyWebinarsView,
    PaymentProofView,
    PublicRegisterView,
    RegisterView,
    SubmitPaymentView,
    WebinarCatalogView,
    WebinarDetailView,
    WebinarListView,
    WebinarResourcesView,
)

urlpatterns = [
    path("webinars", WebinarListView.as_view(), name="webinar-list"),
    path("webinars/my-webinars", MyWebinarsView.as_view(), name="my-webinars"),
    path("webinars/by-ids", WebinarCatalogView.as_view(), name="webinar-catalog"),
    path("webinars/<str:webinar_id>", WebinarDetailView.as_view(), name="webinar-detail"),
    path("webinars/<str:webinar_id>/resources", WebinarResourcesView.as_view(), name="webinar-resources"),
    path("webinars/<str:webinar_id>/register", RegisterView.as_view(), name="webinar-register"),
    path(
        "webinars/<str:webinar_id>/public-register",
        PublicRegisterView.as_view(),
        name="webinar-public-register",
    ),
    path(
        "webinars/<str:webinar_id>/submit-payment",
        SubmitPaymentView.as_view(),
        name="webinar-submit-payment",
    ),
    path("webinars/<str:webinar_id>/attendees", AttendeeListView.as_view(), name="attendee-list"),
    path(
        "webinars/<str:webinar_id>/attendees/<str:user_id>",
        AttendeeDetailView.as_view(),
        name="attendee-detail",
    ),
    path(
        "webinars/<str:webinar_id>/attendees/<str:user_id>/confirm",
        ConfirmPaymentView.as_view(),
        name="attendee-confirm",
    ),
    path(
        "webinars/<str:webinar_id>/attendees/<str:user_id>/payment-proof",
        PaymentProofView.as_view(),
        name="attendee-payment-proof",
    ),
    path(
        "webinars/<str:webinar_id>/attendees/<str:user_id>/slots",
        AttendeeSlotsView.as_view(),
        name="attendee-slots",
    ),
    path("credits/<str:user_id>", CreditTopUpView.as_view(), name="credit-top-up"),
]
