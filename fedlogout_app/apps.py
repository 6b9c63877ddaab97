from django.apps import AppConfig
import logging

from fedlogout_app.conf import LogoutConfig
from fedlogout_app.signature import JWKSignatureVerifier

logger = logging.getLogger(__name__)


class FedlogoutConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "fedlogout_app"
    verbose_name = "Federated back-channel logout"

    logout_config = LogoutConfig()
    verifier: JWKSignatureVerifier

    def ready(self) -> None:
        self.logout_config = LogoutConfig.from_settings()
        logger.debug(f"Back-channel logout configuration: {self.logout_config}")

        # shared by all requests so JWKS responses stay cached
        self.verifier = JWKSignatureVerifier(timeout=self.logout_config.jwks_timeout)

        # Register signal handlers at startup
        try:
            from . import signals  # noqa: F401
        except Exception:
            logger.exception("Failed to import fedlogout_app.signals in AppConfig.ready()")
        return None
