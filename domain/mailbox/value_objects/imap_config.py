"""IMAP 配置值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class ImapConfig(BaseValueObject):
    """
    IMAP 邮箱连接配置值对象

    Attributes:
        server: IMAP 服务器地址
        username: 登录用户名
        password: 登录密码
        port: IMAP 服务器端口，默认 993 (SSL/TLS)
        folder: 轮询的收件箱文件夹，默认 INBOX
        timeout: 套接字超时（秒）
    """

    server: str
    username: str
    password: str
    port: int = 993
    folder: str = "INBOX"
    timeout: float = 30.0

    def validate(self) -> None:
        """验证 IMAP 配置的有效性"""
        if not self.server or not self.server.strip():
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.server,
                reason="IMAP server cannot be empty"
            )

        if not 1 <= self.port <= 65535:
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.port,
                reason=f"Invalid port number: {self.port}. Must be between 1 and 65535"
            )

        if not self.username:
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.username,
                reason="IMAP username cannot be empty"
            )

        if not self.folder:
            raise InvalidValueObjectException(
                value_object_type="ImapConfig",
                value=self.folder,
                reason="IMAP folder cannot be empty"
            )

    @property
    def connection_string(self) -> str:
        """返回 imaps://<username>:<password>@<host>:<port>/<folder> 格式的连接串"""
        return f"imaps://{self.username}:{self.password}@{self.server}:{self.port}/{self.folder}"

    @property
    def masked_connection_string(self) -> str:
        """隐藏密码的连接串，用于日志"""
        return f"imaps://{self.username}:***@{self.server}:{self.port}/{self.folder}"
