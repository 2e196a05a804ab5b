"""SMTP 邮件发送实现"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Optional

from domain.mail.services.mail_sender import MailSender, MailSendError
from domain.mail.value_objects.outgoing_mail import OutgoingMail
from domain.mailbox.value_objects.smtp_config import SmtpConfig


class SmtpMailSenderImpl(MailSender):
    """
    SMTP 邮件发送实现

    使用标准库 smtplib，每次发送建立一次会话：
    smtp 协议下先明文连接再 STARTTLS，smtps 协议直接 SSL。
    """

    def __init__(
        self,
        config: SmtpConfig,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化 SMTP 发送服务

        Args:
            config: SMTP 配置
            debug: 是否输出 SMTP 协议调试信息
            logger: 可选的日志记录器
        """
        self._config = config
        self._debug = debug
        self._logger = logger or logging.getLogger(__name__)

    def send(self, mail: OutgoingMail) -> None:
        message = self._build_message(mail)
        server = f"{self._config.server}:{self._config.port}"

        try:
            with self._open_session() as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailSendError(server=server, message=str(e)) from e

        self._logger.info(f"Sent mail to {mail.to_address} via {server}")

    def _build_message(self, mail: OutgoingMail) -> EmailMessage:
        message = EmailMessage()
        message["From"] = mail.from_address
        message["To"] = mail.to_address
        message["Subject"] = mail.subject
        message["Date"] = formatdate(localtime=True)
        message["Message-ID"] = make_msgid()
        message.set_content(mail.body)
        return message

    def _open_session(self) -> smtplib.SMTP:
        """建立已认证的 SMTP 会话"""
        context = ssl.create_default_context()

        if self._config.use_ssl:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(
                host=self._config.server,
                port=self._config.port,
                timeout=self._config.timeout,
                context=context,
            )
        else:
            smtp = smtplib.SMTP(
                host=self._config.server,
                port=self._config.port,
                timeout=self._config.timeout,
            )

        try:
            if self._debug:
                smtp.set_debuglevel(1)

            if not self._config.use_ssl and self._config.starttls:
                smtp.starttls(context=context)

            if self._config.username:
                smtp.login(self._config.username, self._config.password)
        except Exception:
            smtp.close()
            raise

        return smtp
