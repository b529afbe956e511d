"""
Order Email Tests

Tests the customer emails sent for new orders and status changes, and the
Celery task that sends status emails. Uses Django's locmem email backend.

Run with: pytest backend/notifications/tests/test_order_emails.py -v
"""
import pytest
from smtplib import SMTPException
from unittest.mock import patch

from django.core import mail

from notifications.services import STATUS_MESSAGES, EmailService
from notifications.tasks import send_order_status_email
from orders.models import Order
from orders.services import OrderService


@pytest.mark.django_db
class TestOrderConfirmationEmail:

    def test_confirmation_content(self, order_tenant_a, postcode_config_tenant_a):
        sent = EmailService().send_order_confirmation_email(order_tenant_a)

        assert sent is True
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == "Order Confirmation #GF251018-001 - Golden Fish York"
        assert message.from_email == "Golden Fish <onlineorder@goldenfish.co.uk>"
        assert message.to == ["jane.smith@example.com"]

        html, mimetype = message.alternatives[0]
        assert mimetype == "text/html"
        assert "Cod and Chips" in html
        assert "18.50" in html
        assert "12 Walmgate, York YO1 9TX" in html
        assert "GF251018-001" in message.body

    def test_discounted_fee_shows_original(self, order_tenant_a):
        EmailService().send_order_confirmation_email(order_tenant_a)

        html = mail.outbox[0].alternatives[0][0]
        assert "3.00" in html
        assert "1.50" in html

    def test_order_without_email(self, order_tenant_a):
        order_tenant_a.customer_email = ""

        assert EmailService().send_order_confirmation_email(order_tenant_a) is False
        assert len(mail.outbox) == 0

    def test_mail_server_failure_returns_false(self, order_tenant_a):
        with patch("notifications.services.send_mail", side_effect=SMTPException("connection refused")):
            assert EmailService().send_order_confirmation_email(order_tenant_a) is False

    def test_local_time_uses_restaurant_time_zone(self, settings):
        settings.ORDERS = {**settings.ORDERS, "TIME_ZONE": "Not/AZone"}

        # Unknown zones fall back to UTC rather than failing the email
        assert len(EmailService()._local_time_after(30)) == 5


@pytest.mark.django_db
class TestStatusUpdateEmail:

    @pytest.mark.parametrize("status", ["preparing", "ready", "completed", "cancelled"])
    def test_each_customer_facing_status(self, order_tenant_a, status):
        order_tenant_a.status = status

        assert EmailService().send_order_status_update_email(order_tenant_a) is True

        message = mail.outbox[0]
        assert message.subject == "Order Update #GF251018-001 - Golden Fish York"
        assert STATUS_MESSAGES[status] in message.body

    def test_staff_notes_are_included(self, order_tenant_a):
        order_tenant_a.status = Order.OrderStatus.READY

        EmailService().send_order_status_update_email(order_tenant_a, notes="Driver is on the way")

        assert "Driver is on the way" in mail.outbox[0].body

    def test_received_status_sends_nothing(self, order_tenant_a):
        assert EmailService().send_order_status_update_email(order_tenant_a) is False
        assert len(mail.outbox) == 0

    def test_queued_status_wins_over_current_status(self, order_tenant_a):
        # The order has already moved on to ready; the email is for preparing
        order_tenant_a.status = Order.OrderStatus.READY

        EmailService().send_order_status_update_email(order_tenant_a, status=Order.OrderStatus.PREPARING)

        body = mail.outbox[0].body
        assert STATUS_MESSAGES["preparing"] in body
        assert STATUS_MESSAGES["ready"] not in body


@pytest.mark.django_db
class TestSendOrderStatusEmailTask:

    def test_sends_email(self, order_tenant_a):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(status=Order.OrderStatus.READY)

        result = send_order_status_email.apply(args=[str(order_tenant_a.pk), "ready", "Ready at the counter"]).get()

        assert result["status"] == "sent"
        assert result["order_number"] == "GF251018-001"
        assert result["order_status"] == "ready"
        assert "Ready at the counter" in mail.outbox[0].body

    def test_missing_order(self):
        result = send_order_status_email.apply(args=["00000000-0000-0000-0000-000000000000", "ready"]).get()

        assert result["status"] == "failed"
        assert result["error"] == "Order not found"

    @patch("notifications.tasks.EmailService.send_order_status_update_email", return_value=False)
    def test_failed_send_is_retried(self, mock_send, order_tenant_a):
        Order.all_objects.filter(pk=order_tenant_a.pk).update(status=Order.OrderStatus.PREPARING)

        result = send_order_status_email.apply(args=[str(order_tenant_a.pk), "preparing"]).get()

        # First attempt plus max_retries
        assert mock_send.call_count == 4
        assert result["status"] == "not_sent"

    @patch("notifications.tasks.EmailService.send_order_status_update_email", return_value=False)
    def test_status_without_email_is_not_retried(self, mock_send, order_tenant_a):
        result = send_order_status_email.apply(args=[str(order_tenant_a.pk), "received"]).get()

        assert mock_send.call_count == 1
        assert result["status"] == "not_sent"

    @patch("notifications.tasks.EmailService.send_order_status_update_email", return_value=False)
    def test_retry_decision_uses_queued_status(self, mock_send, order_tenant_a):
        # Still "received" in the database, but the task was queued for preparing
        result = send_order_status_email.apply(args=[str(order_tenant_a.pk), "preparing"]).get()

        assert mock_send.call_count == 4
        assert result["order_status"] == "preparing"

    @patch("orders.services.order_service.send_order_status_email")
    def test_back_to_back_changes_each_email_their_own_status(self, mock_task, order_tenant_a,
                                                             django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            OrderService.update_order_status(order_tenant_a, Order.OrderStatus.PREPARING)
        with django_capture_on_commit_callbacks(execute=True):
            OrderService.update_order_status(order_tenant_a, Order.OrderStatus.READY)

        # Both tasks run only after the order has reached ready
        for queued in mock_task.delay.call_args_list:
            send_order_status_email.apply(args=list(queued.args)).get()

        assert len(mail.outbox) == 2
        assert STATUS_MESSAGES["preparing"] in mail.outbox[0].body
        assert STATUS_MESSAGES["ready"] not in mail.outbox[0].body
        assert STATUS_MESSAGES["ready"] in mail.outbox[1].body
