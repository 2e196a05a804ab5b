"""EmailMessageParserImpl 单元测试"""

from email.message import EmailMessage

import pytest

from domain.mail.services.mail_message_parser import MailParseError
from infrastructure.mail.services.email_message_parser_impl import EmailMessageParserImpl


def create_plain_email(
    subject: str = "Invoice",
    body: str = "Please see attached",
    message_id: str = "<invoice@example.com>",
) -> bytes:
    """创建纯文本邮件"""
    content = f"""From: Sender <sender@example.com>
To: Relay <relay@example.com>, other@example.com
Subject: {subject}
Message-ID: {message_id}
Date: Mon, 16 Dec 2024 10:00:00 +0000
Content-Type: text/plain; charset="utf-8"

{body}"""
    return content.encode("utf-8")


def create_multipart_email() -> bytes:
    """创建带 HTML 和附件的 multipart 邮件"""
    msg = EmailMessage()
    msg["From"] = "sender@example.com"
    msg["To"] = "relay@example.com"
    msg["Subject"] = "Report"
    msg["Message-ID"] = "<report@example.com>"
    msg.set_content("Plain version")
    msg.add_alternative("<p>HTML version</p>", subtype="html")
    msg.add_attachment(b"%PDF-1.4", maintype="application", subtype="pdf", filename="report.pdf")
    return msg.as_bytes()


@pytest.fixture
def parser():
    return EmailMessageParserImpl()


class TestEmailMessageParserImpl:
    """邮件解析测试"""

    def test_parse_plain_email(self, parser):
        parsed = parser.parse(create_plain_email())

        assert parsed.subject == "Invoice"
        assert parsed.body_text == "Please see attached"
        assert parsed.body_html is None
        assert parsed.message_id == "<invoice@example.com>"
        assert parsed.from_address == "Sender <sender@example.com>"
        assert parsed.to_addresses == ("relay@example.com", "other@example.com")

    def test_parse_multipart_email(self, parser):
        """测试 multipart 邮件取纯文本和 HTML，忽略附件"""
        parsed = parser.parse(create_multipart_email())

        assert parsed.body_text.strip() == "Plain version"
        assert parsed.body_html.strip() == "<p>HTML version</p>"

    def test_parse_html_only_email(self, parser):
        raw = (
            b"From: sender@example.com\r\n"
            b"Subject: Html\r\n"
            b"Content-Type: text/html; charset=utf-8\r\n"
            b"\r\n"
            b"<b>hello</b>"
        )

        parsed = parser.parse(raw)

        assert parsed.body_text is None
        assert parsed.content.plain_text == ""
        assert parsed.body_html == "<b>hello</b>"

    def test_parse_encoded_subject(self, parser):
        """测试解码 RFC 2047 编码的主题"""
        parsed = parser.parse(create_plain_email(subject="=?utf-8?b?5rWL6K+V?="))

        assert parsed.subject == "测试"

    def test_missing_message_id(self, parser):
        raw = b"From: a@example.com\r\nSubject: x\r\n\r\nbody"

        parsed = parser.parse(raw)

        assert parsed.message_id is None
        assert parsed.to_addresses == ()

    def test_empty_message_raises_error(self, parser):
        with pytest.raises(MailParseError):
            parser.parse(b"")

    def test_multipart_without_boundary_raises_error(self, parser):
        """测试缺少 boundary 的 multipart 邮件视为解析失败"""
        raw = (
            b"From: a@example.com\r\n"
            b"Subject: broken\r\n"
            b"Content-Type: multipart/mixed\r\n"
            b"\r\n"
            b"no boundary here"
        )

        with pytest.raises(MailParseError) as exc_info:
            parser.parse(raw)

        assert "NoBoundaryInMultipartDefect" in str(exc_info.value)

    def test_decode_header_value_none(self, parser):
        assert parser._decode_header_value(None) == ""
