"""邮件正文值对象"""

from dataclasses import dataclass
from typing import Optional

from domain.common.base_value_object import BaseValueObject


@dataclass(frozen=True)
class EmailContent(BaseValueObject):
    """
    邮件正文值对象

    保存 MIME 解析出的第一个 text/plain 与 text/html 部分，
    附件不在此列。

    Attributes:
        text: 纯文本正文
        html: HTML 正文
    """

    text: Optional[str] = None
    html: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_html(self) -> bool:
        return bool(self.html)

    @property
    def is_empty(self) -> bool:
        return not self.has_text and not self.has_html

    @property
    def plain_text(self) -> str:
        """
        转发用的纯文本正文

        没有 text/plain 部分时返回空字符串，HTML 不会被降级使用。
        """
        return self.text or ""
