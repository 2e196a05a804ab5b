"""邮件发送服务接口"""

from abc import ABC, abstractmethod

from domain.mail.value_objects.outgoing_mail import OutgoingMail


class MailSender(ABC):
    """
    邮件发送服务接口

    每次 send 建立一次经过认证的 SMTP 会话。
    """

    @abstractmethod
    def send(self, mail: OutgoingMail) -> None:
        """
        发送邮件

        Args:
            mail: 待发送的邮件

        Raises:
            MailSendError: 连接、认证或投递失败
        """
        raise NotImplementedError


class MailSendError(Exception):
    """SMTP 发送错误"""

    def __init__(self, server: str, message: str):
        self.server = server
        super().__init__(f"Failed to send mail via {server} - {message}")
