"""
Notification Service — SMS delivery through the Payless SMS gateway.

Built once at startup from settings and injected where needed; never a
module-level singleton. The gateway takes a GET with query parameters.

The template helpers (send_password_reset_otp, send_verification_sms,
send_test_sms) are part of the service's public API for the account and
operator flows that sit in front of this backend.
"""
import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Set

import httpx

from payless.config import Settings

logger = logging.getLogger(__name__)

SMSResult = Dict[str, Any]

TEMPLATES: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "password-reset-otp": lambda data: (
        f"Payless Password Reset OTP: \n\nYour OTP code is {data.get('otp')} \n\n"
        f"This code expires in {data.get('expiresIn') or '15 minutes'}. DO NOT share this code with anyone. \n"
        "If you didn't request this, please ignore this message."
    ),
    "verification": lambda data: (
        f"Payless Verification: Your verification code is {data.get('code')} "
        f"This code expires in {data.get('expiresIn') or '10 minutes'}."
    ),
    "notification": lambda data: data.get("message") or "You have a new notification from Payless.",
}


class SMSService:
    """Async SMS client with template support."""

    def __init__(
        self,
        api_key: str = "",
        password: str = "",
        base_url: str = "",
        sender: str = "Payless",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._password = password
        self._base_url = base_url
        self._sender = sender
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._background: Set[asyncio.Task] = set()

        if not self.is_configured:
            logger.warning("SMS service not configured: Missing API credentials")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMSService":
        return cls(
            api_key=settings.SMS_API_KEY,
            password=settings.SMS_PASSWORD,
            base_url=settings.SMS_BASE_URL,
            sender=settings.SMS_SENDER,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def render_template(name: str, data: Dict[str, Any]) -> str:
        template = TEMPLATES.get(name)
        if template is None:
            raise ValueError(f"SMS template not found: {name}")
        return template(data)

    async def _send_request(self, to: str, message: str) -> SMSResult:
        request_id = str(int(time.time() * 1000))
        params = {
            "api_key": self._api_key,
            "password": self._password,
            "action": "send_sms",
            "from": self._sender,
            "to": to,
            "message": message,
            "_id": request_id,
        }
        logger.info("Sending SMS", extra={"request_id": request_id})
        try:
            response = await self.client.get(
                self._base_url,
                params=params,
                headers={"Accept": "application/json", "User-Agent": "Payless-SMS-Service/1.0"},
            )
        except httpx.HTTPError as e:
            logger.error("SMS transport error", extra={"request_id": request_id, "error": str(e)})
            return {"success": False, "message": f"SMS provider unreachable: {e}"}

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}
        if not isinstance(body, dict):
            body = {"message": str(body)}

        if response.is_error:
            reason = body.get("message") or f"SMS API error: {response.status_code}"
            logger.error(
                "SMS provider rejected request",
                extra={"request_id": request_id, "status_code": response.status_code, "error": reason},
            )
            return {"success": False, "message": reason}

        return {
            "success": True,
            "message": "SMS sent successfully",
            "data": {"messageId": body.get("messageId") or body.get("_id") or request_id},
        }

    async def send_sms(
        self,
        to: str,
        message: Optional[str] = None,
        template: Optional[str] = None,
        template_data: Optional[Dict[str, Any]] = None,
    ) -> SMSResult:
        """Send one SMS. Never raises for provider problems; check ``success``."""
        if not self.is_configured:
            return {
                "success": False,
                "message": "SMS service is not configured. Please check SMS API settings.",
            }
        if template and template_data is not None:
            try:
                text = self.render_template(template, template_data)
            except ValueError as e:
                return {"success": False, "message": str(e)}
        else:
            text = message or "Notification from Payless"
        return await self._send_request(to, text)

    def send_in_background(self, to: str, **kwargs) -> asyncio.Task:
        """Fire-and-forget send: the caller gets no delivery guarantee, failures are only logged."""
        task = asyncio.get_running_loop().create_task(self.send_sms(to, **kwargs))
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background SMS failed", exc_info=error)
        elif not task.result().get("success"):
            logger.error("Background SMS failed", extra={"error": task.result().get("message")})

    def send_password_reset_otp(self, phone_number: str, otp: str) -> asyncio.Task:
        return self.send_in_background(
            phone_number,
            template="password-reset-otp",
            template_data={"otp": otp, "expiresIn": "15 minutes"},
        )

    async def send_verification_sms(self, phone_number: str, code: str) -> SMSResult:
        return await self.send_sms(
            phone_number,
            template="verification",
            template_data={"code": code, "expiresIn": "10 minutes"},
        )

    async def send_test_sms(self, phone_number: str, message: str = "Test message from Payless SMS Service") -> SMSResult:
        return await self.send_sms(phone_number, message=message)
