from itam.data.notifications.email_config import EmailConfig
from itam.data.notifications.email_log import EmailLog

__all__ = ['EmailConfig', 'EmailLog']
