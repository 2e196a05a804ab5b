"""Tests for SmtpConfig value object"""

import pytest

from domain.mailbox.value_objects.smtp_config import SmtpConfig
from domain.common.exceptions import InvalidValueObjectException


class TestSmtpConfig:
    """SmtpConfig 值对象测试"""

    def test_create_with_defaults(self):
        config = SmtpConfig(server="smtp.example.com", username="u", password="p")

        assert config.port == 587
        assert config.protocol == "smtp"
        assert config.starttls is True
        assert config.use_ssl is False

    def test_smtps_uses_ssl(self):
        config = SmtpConfig(
            server="smtp.example.com", username="u", password="p", port=465, protocol="SMTPS"
        )

        assert config.use_ssl is True

    def test_empty_server_raises_error(self):
        with pytest.raises(InvalidValueObjectException) as exc_info:
            SmtpConfig(server="", username="u", password="p")

        assert "SMTP server cannot be empty" in exc_info.value.message

    def test_invalid_port_raises_error(self):
        with pytest.raises(InvalidValueObjectException):
            SmtpConfig(server="smtp.example.com", username="u", password="p", port=70000)

    def test_unsupported_protocol_raises_error(self):
        with pytest.raises(InvalidValueObjectException) as exc_info:
            SmtpConfig(server="smtp.example.com", username="u", password="p", protocol="lmtp")

        assert "Unsupported protocol" in exc_info.value.message
