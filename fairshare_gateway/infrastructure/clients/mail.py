"""Mail API client for transactional email delivery"""

import httpx
from fairshare_gateway.config import settings
from fairshare_gateway.domain.exceptions import TransportFailureError, TransportUnavailableError
from fairshare_gateway.domain.models import EmailMessage
from fairshare_gateway.infrastructure.observability.metrics import mail_latency_histogram, mail_failure_counter


class MailClient:
    """Client for an HTTP transactional mail provider"""

    def __init__(self, api_url: str | None = None, api_key: str | None = None, timeout: float | None = None):
        self.api_url = api_url or settings.mail_api_url
        self.api_key = api_key or settings.mail_api_key
        self.timeout = timeout or settings.http_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    async def send(self, message: EmailMessage) -> None:
        """
        Deliver one message. Single attempt, no retries.

        Raises:
            TransportUnavailableError: Transport credentials are not configured
            TransportFailureError: On timeout, network or HTTP errors
        """
        if not self.is_configured:
            raise TransportUnavailableError("Mail transport is not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with mail_latency_histogram.time():
                    response = await client.post(
                        self.api_url,
                        json={
                            "from": message.sender,
                            "to": message.to,
                            "subject": message.subject,
                            "html": message.html,
                            "text": message.text,
                        },
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
                    response.raise_for_status()

            except httpx.TimeoutException as e:
                mail_failure_counter.inc()
                raise TransportFailureError(f"Mail API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                mail_failure_counter.inc()
                raise TransportFailureError(f"Mail API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                mail_failure_counter.inc()
                raise TransportFailureError(f"Mail API unreachable: {e}") from e
