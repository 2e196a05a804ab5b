"""SMTP 配置值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


SUPPORTED_PROTOCOLS = ("smtp", "smtps")


@dataclass(frozen=True)
class SmtpConfig(BaseValueObject):
    """
    SMTP 发信配置值对象

    Attributes:
        server: SMTP 服务器地址
        username: 登录用户名
        password: 登录密码
        port: 端口，默认 587 (STARTTLS)
        protocol: smtp（明文连接后 STARTTLS）或 smtps（直接 SSL）
        starttls: protocol 为 smtp 时是否执行 STARTTLS
        timeout: 套接字超时（秒）
    """

    server: str
    username: str
    password: str
    port: int = 587
    protocol: str = "smtp"
    starttls: bool = True
    timeout: float = 30.0

    def validate(self) -> None:
        if not self.server or not self.server.strip():
            raise InvalidValueObjectException(
                value_object_type="SmtpConfig",
                value=self.server,
                reason="SMTP server cannot be empty"
            )

        if not 1 <= self.port <= 65535:
            raise InvalidValueObjectException(
                value_object_type="SmtpConfig",
                value=self.port,
                reason=f"Invalid port number: {self.port}. Must be between 1 and 65535"
            )

        if self.protocol.lower() not in SUPPORTED_PROTOCOLS:
            raise InvalidValueObjectException(
                value_object_type="SmtpConfig",
                value=self.protocol,
                reason=f"Unsupported protocol: {self.protocol}"
            )

    @property
    def use_ssl(self) -> bool:
        return self.protocol.lower() == "smtps"
