"""邮件存储服务接口"""

from abc import ABC, abstractmethod
from typing import List, Optional

from domain.mail.value_objects.message_reference import MessageReference


class MailFolder(ABC):
    """
    已打开的邮件文件夹

    一个实例对应一次逻辑工作单元（一次列举或一封邮件的处理），
    用完即关闭，不跨线程共享。支持上下文管理器用法：

        with store.open_folder("INBOX") as folder:
            refs = folder.list_messages()

    退出上下文时调用 close(expunge=...)，expunge 取决于打开方式。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """文件夹名称"""
        raise NotImplementedError

    @property
    @abstractmethod
    def readonly(self) -> bool:
        """是否以只读方式打开"""
        raise NotImplementedError

    @abstractmethod
    def list_messages(self, unseen_only: bool = False) -> List[MessageReference]:
        """
        批量获取文件夹内未删除邮件的元数据

        一次 FETCH 取回 UID、标记、大小和 Message-ID 头部。

        Args:
            unseen_only: 仅返回未读邮件

        Returns:
            邮件引用列表

        Raises:
            MailStoreOperationError: 服务器返回非 OK
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_message(self, uid: str) -> bytes:
        """
        获取完整的原始邮件，不改变 \\Seen 标记

        Raises:
            MailStoreOperationError: 邮件不存在或服务器返回非 OK
        """
        raise NotImplementedError

    @abstractmethod
    def folder_exists(self, name: str) -> bool:
        """判断同一邮箱中是否存在指定文件夹"""
        raise NotImplementedError

    @abstractmethod
    def copy_message(self, uid: str, target_folder: str) -> None:
        """
        复制邮件到另一个文件夹

        Raises:
            MailStoreOperationError: 复制失败
        """
        raise NotImplementedError

    @abstractmethod
    def flag_deleted(self, uid: str) -> None:
        """
        为邮件设置 \\Deleted 标记

        关闭文件夹时若 expunge=True，邮件被永久删除。

        Raises:
            MailStoreOperationError: 设置失败
        """
        raise NotImplementedError

    @abstractmethod
    def close(self, expunge: bool = False) -> None:
        """关闭文件夹并断开连接，重复调用无副作用"""
        raise NotImplementedError

    def __enter__(self) -> "MailFolder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(expunge=not self.readonly)


class MailStore(ABC):
    """
    邮件存储服务接口

    负责建立到邮箱的连接并打开文件夹，具体实现在基础设施层。
    """

    @abstractmethod
    def open_folder(self, name: Optional[str] = None, readonly: bool = False) -> MailFolder:
        """
        打开文件夹

        Args:
            name: 文件夹名称，默认为配置的收件箱
            readonly: 只读打开；读写打开的文件夹在关闭时执行 expunge

        Returns:
            已打开的 MailFolder

        Raises:
            MailStoreConnectionError: 连接失败
            MailStoreAuthenticationError: 认证失败
            MailStoreOperationError: 文件夹无法选中
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def inbox(self) -> str:
        """轮询的收件箱名称"""
        raise NotImplementedError


class MailStoreError(Exception):
    """邮件存储错误基类"""


class MailStoreConnectionError(MailStoreError):
    """邮件存储连接错误"""

    def __init__(self, server: str, port: int, message: str):
        self.server = server
        self.port = port
        super().__init__(f"Failed to connect to {server}:{port} - {message}")


class MailStoreAuthenticationError(MailStoreError):
    """邮件存储认证错误"""

    def __init__(self, username: str, message: str):
        self.username = username
        super().__init__(f"Authentication failed for {username} - {message}")


class MailStoreOperationError(MailStoreError):
    """IMAP 命令执行失败"""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(f"IMAP {command} failed - {message}")
