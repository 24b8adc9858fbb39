"""
Client for the send-asset-email function

All action handlers reach the function through this client. Failures never
raise: connection errors, non-2xx responses and `success: false` bodies are
logged and come back as an EmailResult with ok=False so the caller can show
a non-blocking warning.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import requests
from itam.logger import get_logger

logger = get_logger("itam.services.notifications.email_function_client")

FUNCTION_PATH = '/functions/send-asset-email'


@dataclass
class EmailResult:
    ok: bool
    skipped: bool = False
    message: str = ''
    data: Dict[str, Any] = field(default_factory=dict)


class EmailFunctionClient:
    """
    Invokes send-asset-email over HTTP.

    An empty base URL means the function is served by this application; the
    URL is then built from the incoming request's host at call time.
    """

    def __init__(self, url: str = '', secret: str = '', timeout: int = 20,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.secret = secret
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_app(cls, app) -> 'EmailFunctionClient':
        return cls(
            url=app.config.get('EMAIL_FUNCTION_URL', ''),
            secret=app.config.get('EMAIL_FUNCTION_SECRET', ''),
            timeout=app.config.get('EMAIL_FUNCTION_TIMEOUT', 20),
        )

    def _endpoint(self) -> str:
        if self.url:
            return self.url
        from flask import request, has_request_context
        if has_request_context():
            return request.host_url.rstrip('/') + FUNCTION_PATH
        return 'http://localhost:5000' + FUNCTION_PATH

    def invoke(
        self,
        template_id: str,
        recipient_email: Optional[str],
        tenant_id: Optional[int] = None,
        asset_id: Optional[int] = None,
        variables: Optional[Dict[str, Any]] = None,
        assets: Optional[List[Dict[str, Any]]] = None,
        test_mode: bool = False,
    ) -> EmailResult:
        payload: Dict[str, Any] = {
            'templateId': template_id,
            'recipientEmail': recipient_email,
            'tenantId': tenant_id,
            'assetId': asset_id,
            'variables': variables or {},
        }
        if assets:
            payload['assets'] = assets
        if test_mode:
            payload['testMode'] = True

        headers = {'Accept': 'application/json'}
        if self.secret:
            headers['Authorization'] = f'Bearer {self.secret}'

        try:
            response = self.session.post(self._endpoint(), json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.warning(f"send-asset-email timed out after {self.timeout}s (template={template_id})")
            return EmailResult(ok=False, message='Email request timed out')
        except requests.exceptions.RequestException as e:
            logger.warning(f"send-asset-email unreachable (template={template_id}): {type(e).__name__}")
            return EmailResult(ok=False, message='Email service unreachable')

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok or not body.get('success'):
            error = body.get('error') or f'HTTP {response.status_code}'
            logger.warning(f"send-asset-email failed (template={template_id}): {error}")
            return EmailResult(ok=False, message=error, data=body)

        if body.get('skipped'):
            logger.info(f"send-asset-email skipped (template={template_id}): {body.get('reason')}")
            return EmailResult(ok=True, skipped=True, message=body.get('reason', ''), data=body)

        return EmailResult(ok=True, message=body.get('message', 'Email sent'), data=body)
