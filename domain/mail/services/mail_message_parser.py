"""MIME 邮件解析服务接口"""

from abc import ABC, abstractmethod

from domain.mail.value_objects.parsed_email import ParsedEmail


class MailMessageParser(ABC):
    """将原始 RFC 822 字节解析为 ParsedEmail"""

    @abstractmethod
    def parse(self, raw: bytes) -> ParsedEmail:
        """
        解析邮件

        Raises:
            MailParseError: 邮件结构无法解析
        """
        raise NotImplementedError


class MailParseError(Exception):
    """MIME 解析错误"""
