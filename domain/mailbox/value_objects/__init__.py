"""邮箱连接值对象模块"""

from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.smtp_config import SmtpConfig

__all__ = ["ImapConfig", "SmtpConfig"]
