from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags
import logging
from django.utils import timezone
from datetime import timedelta
import pytz

from core_backend.utils.pii import PIIProtection

logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "preparing": "Your order is being prepared",
    "ready": "Your order is ready!",
    "completed": "Your order has been completed",
    "cancelled": "Your order has been cancelled",
}


class EmailService:
    """
    Customer emails for orders.

    Every public send_* method returns True/False and never raises: an order
    is final before its email is attempted, so a mail failure is logged and
    reported, not propagated.
    """

    def __init__(self):
        # Format the sender's email to include a display name
        from_email_address = getattr(
            settings, "DEFAULT_FROM_EMAIL", "onlineorder@goldenfish.co.uk"
        )
        from_name = getattr(settings, "EMAIL_FROM_NAME", "Golden Fish")
        self.default_from_email = f"{from_name} <{from_email_address}>"

    def send_email(self, recipient_list, subject, template_name, context):
        """
        Sends an email using a Django template.

        Args:
            recipient_list (list): A list of recipient email addresses.
            subject (str): The subject of the email.
            template_name (str): The path to the email template (e.g., 'emails/order_confirmation.html').
            context (dict): A dictionary of data to render in the template.
        """
        html_message = render_to_string(template_name, context)
        send_mail(
            subject,
            strip_tags(html_message),
            self.default_from_email,
            recipient_list,
            html_message=html_message,
            fail_silently=False,
        )

    def send_order_confirmation_email(self, order):
        """
        Sends the order confirmation with items, totals and the estimated time.

        Args:
            order: The Order instance to send confirmation for
        """
        try:
            recipient_email = order.customer_email
            if not recipient_email:
                logger.warning(f"No email address found for order {order.order_number}")
                return False

            context = {
                "order": {
                    "order_number": order.order_number,
                    "customer_name": order.customer_name,
                    "delivery_type": order.delivery_type,
                    "delivery_type_display": order.get_delivery_type_display(),
                    "delivery_address": order.delivery_address,
                    "delivery_city": order.delivery_city,
                    "delivery_postcode": order.delivery_postcode,
                    "delivery_instructions": order.delivery_instructions,
                    "special_instructions": order.special_instructions,
                    "customer_phone": order.customer_phone,
                    "payment_method": order.get_payment_method_display(),
                    "items": [
                        {
                            "name": item.name,
                            "quantity": item.quantity,
                            "options": ", ".join(
                                option.get("name", "") for option in item.selected_options or []
                            ),
                            "is_free_item": item.is_free_item,
                            "total": item.total_price,
                        }
                        for item in order.items.all()
                    ],
                    "subtotal": order.subtotal,
                    "delivery_fee": order.delivery_fee,
                    "original_delivery_fee": order.original_delivery_fee,
                    "discount": order.discount,
                    "total": order.total,
                    "estimated_minutes": order.estimated_minutes,
                    "estimated_ready_time": self._local_time_after(order.estimated_minutes),
                },
                "store_info": self._get_store_info(order.tenant),
            }

            subject = f"Order Confirmation #{order.order_number} - {context['store_info']['name']}"
            self.send_email(
                recipient_list=[recipient_email],
                subject=subject,
                template_name="emails/order_confirmation.html",
                context=context,
            )

            logger.info(
                f"Order confirmation email sent to {PIIProtection.mask_email(recipient_email)} "
                f"for order {order.order_number}"
            )
            return True

        except Exception as e:
            logger.warning(
                f"Failed to send order confirmation email for order {order.order_number}: {e}"
            )
            return False

    def send_order_status_update_email(self, order, status=None, notes=None):
        """
        Tells the customer their order moved to a new status.

        Only statuses listed in STATUS_MESSAGES produce an email. `status` is the
        status the order moved to; the order may have moved on again since.
        """
        status = status or order.status
        try:
            message = STATUS_MESSAGES.get(status)
            if message is None:
                logger.debug(f"No customer email for status '{status}' on order {order.order_number}")
                return False

            if not order.customer_email:
                logger.warning(f"No email address found for order {order.order_number}")
                return False

            store_info = self._get_store_info(order.tenant)
            context = {
                "order": {
                    "order_number": order.order_number,
                    "customer_name": order.customer_name,
                    "status": status,
                    "status_display": order.OrderStatus(status).label,
                    "delivery_type": order.delivery_type,
                },
                "status_message": message,
                "notes": notes or "",
                "store_info": store_info,
            }

            self.send_email(
                recipient_list=[order.customer_email],
                subject=f"Order Update #{order.order_number} - {store_info['name']}",
                template_name="emails/order_status_update.html",
                context=context,
            )

            logger.info(
                f"Status update email ({status}) sent to {PIIProtection.mask_email(order.customer_email)} "
                f"for order {order.order_number}"
            )
            return True

        except Exception as e:
            logger.warning(
                f"Failed to send status update email for order {order.order_number}: {e}"
            )
            return False

    def _local_time_after(self, minutes):
        """Clock time, in the restaurant's time zone, the given number of minutes from now."""
        utc_time = timezone.now() + timedelta(minutes=minutes or 0)
        try:
            local_tz = pytz.timezone(settings.ORDERS.get("TIME_ZONE", settings.TIME_ZONE))
            return utc_time.astimezone(local_tz).strftime("%H:%M")
        except pytz.UnknownTimeZoneError:
            return utc_time.strftime("%H:%M")  # Fallback to UTC

    def _get_store_info(self, tenant):
        """
        Restaurant details shown in the email footer.

        Args:
            tenant: Tenant instance the order belongs to
        """
        from delivery.models import RestaurantDeliveryConfig

        address = (
            RestaurantDeliveryConfig.all_objects.filter(tenant=tenant)
            .values_list("restaurant_address", flat=True)
            .first()
        )
        return {
            "name": tenant.name,
            "phone": tenant.contact_phone,
            "email": tenant.contact_email,
            "address": address or "",
        }
