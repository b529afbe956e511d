from django.apps import AppConfig
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"

    def ready(self):
        """
        Warn early about configuration the order pipeline depends on.
        """
        if not getattr(settings, "GOOGLE_MAPS_API_KEY", ""):
            logger.debug(
                "GOOGLE_MAPS_API_KEY is not set; distance-priced restaurants cannot quote delivery"
            )

        counter_alias = settings.ORDERS.get("COUNTER_CACHE_ALIAS", "default")
        if counter_alias not in settings.CACHES:
            logger.warning(
                f"Order counter cache '{counter_alias}' is not configured; "
                "order numbers will use the degraded random format"
            )
