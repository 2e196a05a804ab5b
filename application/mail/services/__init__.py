"""邮件应用服务"""

from application.mail.services.mail_polling_service import MailPollingService
from application.mail.services.async_mail_polling_service import AsyncMailPollingService
from application.mail.services.mail_forwarding_service import MailForwardingService

__all__ = ["MailPollingService", "AsyncMailPollingService", "MailForwardingService"]
