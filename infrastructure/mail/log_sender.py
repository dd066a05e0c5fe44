import logging

from core.services.otp_sender import OtpSender

logger = logging.getLogger(__name__)


class LogOtpSender(OtpSender):
    """Заглушка для разработки: код пишется в лог вместо письма."""
    def send(self, email: str, code: str, purpose: str) -> None:
        logger.info("OTP for %s (%s): %s", email, purpose, code)
