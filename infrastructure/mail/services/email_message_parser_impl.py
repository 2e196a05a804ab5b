"""MIME 邮件解析实现"""

import email
import logging
from email import errors as email_errors
from email.header import decode_header
from email.message import Message
from email.utils import getaddresses
from typing import Optional, Tuple

from domain.mail.services.mail_message_parser import MailMessageParser, MailParseError
from domain.mail.value_objects.email_content import EmailContent
from domain.mail.value_objects.parsed_email import ParsedEmail


# 出现这些缺陷时 multipart 正文已无法可靠切分
_FATAL_DEFECTS = (
    email_errors.NoBoundaryInMultipartDefect,
    email_errors.StartBoundaryNotFoundDefect,
    email_errors.MultipartInvariantViolationDefect,
)


class EmailMessageParserImpl(MailMessageParser):
    """
    基于标准库 email 包的 MIME 解析实现

    取第一个非附件的 text/plain 和 text/html 部分，
    头部按 RFC 2047 解码。
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def parse(self, raw: bytes) -> ParsedEmail:
        if not raw:
            raise MailParseError("Empty message")

        try:
            msg = email.message_from_bytes(raw)
        except Exception as e:
            raise MailParseError(f"Failed to parse message: {e}") from e

        self._check_defects(msg)

        try:
            body_text, body_html = self._extract_body(msg)
        except Exception as e:
            raise MailParseError(f"Failed to decode message body: {e}") from e

        message_id = msg.get("Message-ID")

        return ParsedEmail(
            message_id=str(message_id).strip() if message_id else None,
            from_address=self._decode_header_value(msg.get("From", "")),
            to_addresses=self._parse_addresses(msg),
            subject=self._decode_header_value(msg.get("Subject", "")),
            content=EmailContent(text=body_text, html=body_html),
        )

    def _check_defects(self, msg: Message) -> None:
        for part in msg.walk():
            for defect in part.defects:
                if isinstance(defect, _FATAL_DEFECTS):
                    raise MailParseError(
                        f"Malformed MIME structure: {type(defect).__name__}"
                    )
                self._logger.debug(f"Ignoring MIME defect: {type(defect).__name__}")

    def _parse_addresses(self, msg: Message) -> Tuple[str, ...]:
        values = [str(value) for value in msg.get_all("To", [])]
        return tuple(address for _, address in getaddresses(values) if address)

    def _decode_header_value(self, value: Optional[str]) -> str:
        """
        解码邮件头部值（处理编码）

        Args:
            value: 原始头部值

        Returns:
            解码后的字符串
        """
        if not value:
            return ""

        decoded_parts = decode_header(str(value))
        result_parts = []

        for part, charset in decoded_parts:
            if isinstance(part, bytes):
                try:
                    decoded = part.decode(charset or "utf-8", errors="replace")
                except (LookupError, UnicodeDecodeError):
                    decoded = part.decode("utf-8", errors="replace")
                result_parts.append(decoded)
            else:
                result_parts.append(part)

        return "".join(result_parts)

    def _decode_payload(self, part: Message) -> Optional[str]:
        payload = part.get_payload(decode=True)
        if payload is None:
            return None

        charset = part.get_content_charset() or "utf-8"
        try:
            return payload.decode(charset, errors="replace")
        except (LookupError, UnicodeDecodeError):
            return payload.decode("utf-8", errors="replace")

    def _extract_body(self, msg: Message) -> Tuple[Optional[str], Optional[str]]:
        """
        提取邮件正文（纯文本和 HTML）

        Returns:
            (纯文本正文, HTML 正文) 元组
        """
        body_text: Optional[str] = None
        body_html: Optional[str] = None

        for part in msg.walk() if msg.is_multipart() else [msg]:
            if part.is_multipart():
                continue

            # 跳过附件
            if "attachment" in str(part.get("Content-Disposition", "")).lower():
                continue

            content_type = part.get_content_type()
            if content_type == "text/plain" and body_text is None:
                body_text = self._decode_payload(part)
            elif content_type == "text/html" and body_html is None:
                body_html = self._decode_payload(part)

        return body_text, body_html
