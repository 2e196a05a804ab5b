"""
邮箱连接界限上下文

提供连接 IMAP 收件箱与 SMTP 发信服务所需的配置值对象：
- ImapConfig
- SmtpConfig
"""

from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.smtp_config import SmtpConfig

__all__ = [
    "ImapConfig",
    "SmtpConfig",
]
