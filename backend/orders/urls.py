from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("", views.OrderCreateView.as_view(), name="order-create"),
    # Before <order_number>/ so "stats" is not taken for an order number
    path("stats/", views.OrderStatsView.as_view(), name="order-stats"),
    path("<str:order_number>/", views.OrderDetailView.as_view(), name="order-detail"),
    path("<str:order_number>/status/", views.OrderStatusUpdateView.as_view(), name="order-status"),
    path(
        "<str:order_number>/payment-status/",
        views.OrderPaymentStatusView.as_view(),
        name="order-payment-status",
    ),
]
