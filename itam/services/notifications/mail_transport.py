"""
Mail transports used by the send-asset-email function

GraphMailTransport sends through Microsoft Graph with client credentials.
LogMailTransport only logs, for development and tests.
"""

from typing import Dict, List, Optional
import requests
from itam.logger import get_logger

logger = get_logger("itam.services.notifications.mail_transport")

GRAPH_SCOPE = 'https://graph.microsoft.com/.default'
TOKEN_URL = 'https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token'
SEND_MAIL_URL = 'https://graph.microsoft.com/v1.0/users/{sender}/sendMail'

CREDENTIALS_MISSING = (
    'Azure credentials not configured. Please add them via Admin > Email Settings or set '
    'AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, and AZURE_SENDER_EMAIL.'
)


class MailTransportError(Exception):
    """Raised when credentials are missing or a send fails"""
    pass


class GraphMailTransport:
    """Microsoft Graph sendMail over requests"""

    def __init__(self, tenant_id: str, client_id: str, client_secret: str, sender_email: str,
                 source: str = 'env', timeout: int = 20, session: Optional[requests.Session] = None):
        if not (tenant_id and client_id and client_secret and sender_email):
            raise MailTransportError(CREDENTIALS_MISSING)
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.sender_email = sender_email
        self.source = source
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, url, **kwargs):
        try:
            return self.session.post(url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise MailTransportError(f'Mail service unreachable: {type(e).__name__}') from e

    def get_access_token(self) -> str:
        response = self._post(
            TOKEN_URL.format(tenant=self.tenant_id),
            data={
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'scope': GRAPH_SCOPE,
                'grant_type': 'client_credentials',
            },
        )
        if not response.ok:
            raise MailTransportError(f'Azure authentication failed ({response.status_code}): {response.text}')
        return response.json().get('access_token')

    def verify(self) -> None:
        """Obtain a token to prove the credentials work"""
        self.get_access_token()

    def send(self, to_emails: List[str], subject: str, html_body: str, sender_name: Optional[str] = None) -> None:
        token = self.get_access_token()
        message: Dict[str, object] = {
            'subject': subject,
            'body': {'contentType': 'HTML', 'content': html_body},
            'toRecipients': [{'emailAddress': {'address': email}} for email in to_emails],
        }
        if sender_name:
            message['from'] = {'emailAddress': {'name': sender_name, 'address': self.sender_email}}

        logger.info(f"Sending email from {self.sender_email} to {len(to_emails)} recipient(s)")
        response = self._post(
            SEND_MAIL_URL.format(sender=self.sender_email),
            headers={'Authorization': f'Bearer {token}', 'Content-Type': 'application/json'},
            json={'message': message, 'saveToSentItems': True},
        )
        if not response.ok:
            raise MailTransportError(f'Failed to send email ({response.status_code}): {response.text}')


class LogMailTransport:
    """Writes messages to the log instead of sending them"""

    source = 'log'
    sender_email = 'noreply@localhost'

    def __init__(self):
        self.sent = []

    def verify(self) -> None:
        return None

    def send(self, to_emails: List[str], subject: str, html_body: str, sender_name: Optional[str] = None) -> None:
        self.sent.append({'to': list(to_emails), 'subject': subject, 'html': html_body, 'sender_name': sender_name})
        logger.info(f"[log transport] '{subject}' -> {', '.join(to_emails)}")
