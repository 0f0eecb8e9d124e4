from webinars.handlers.views import (
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

__all__ = [
    "AttendeeDetailView",
    "AttendeeListView",
    "AttendeeSlotsView",
    "ConfirmPaymentView",
    "CreditTopUpView",
    "MyWebinarsView",
    "PaymentProofView",
    "PublicRegisterView",
    "RegisterView",
    "SubmitPaymentView",
    "WebinarCatalogView",
    "WebinarDetailView",
    "WebinarListView",
    "WebinarResourcesView",
]
