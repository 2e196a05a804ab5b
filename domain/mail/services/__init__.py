"""邮件领域服务模块"""

from domain.mail.services.mail_store import (
    MailStore,
    MailFolder,
    MailStoreError,
    MailStoreConnectionError,
    MailStoreAuthenticationError,
    MailStoreOperationError,
)
from domain.mail.services.mail_sender import MailSender, MailSendError
from domain.mail.services.mail_message_parser import MailMessageParser, MailParseError

__all__ = [
    "MailStore",
    "MailFolder",
    "MailStoreError",
    "MailStoreConnectionError",
    "MailStoreAuthenticationError",
    "MailStoreOperationError",
    "MailSender",
    "MailSendError",
    "MailMessageParser",
    "MailParseError",
]
