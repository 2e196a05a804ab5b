"""解析后的邮件值对象"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from domain.common.base_value_object import BaseValueObject
from domain.mail.value_objects.email_content import EmailContent


@dataclass(frozen=True)
class ParsedEmail(BaseValueObject):
    """
    解析后的邮件值对象

    表示一封原始 RFC 822 邮件经 MIME 解析后的结果，
    供转发服务记录日志和构造转发邮件使用。

    Attributes:
        message_id: Message-ID 头部，缺失时为 None
        from_address: 发件人
        to_addresses: 收件人列表
        subject: 邮件主题
        content: 正文（纯文本和 HTML）
    """

    message_id: Optional[str]
    from_address: str
    subject: str
    content: EmailContent
    to_addresses: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def body_text(self) -> Optional[str]:
        return self.content.text

    @property
    def body_html(self) -> Optional[str]:
        return self.content.html
