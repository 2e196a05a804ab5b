"""邮件引用值对象"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


DELETED_FLAG = "\\Deleted"
SEEN_FLAG = "\\Seen"


@dataclass(frozen=True)
class MessageReference(BaseValueObject):
    """
    邮件引用值对象

    轮询器发现邮件后投递到队列的工作单元，只携带定位信息，
    不含正文。UID 仅在所属文件夹内唯一；跨连接匹配同一封邮件
    依靠 Message-ID（忽略大小写）。

    Attributes:
        folder: 所属文件夹名称
        uid: IMAP UID
        message_id: Message-ID 头部，读取不到时为 None
        flags: 服务器返回的标记集合
        size: RFC822.SIZE 字节数
    """

    folder: str
    uid: str
    message_id: Optional[str] = None
    flags: FrozenSet[str] = field(default_factory=frozenset)
    size: int = 0

    def validate(self) -> None:
        if not self.folder:
            raise InvalidValueObjectException(
                value_object_type="MessageReference",
                value=self.folder,
                reason="Folder cannot be empty"
            )

        if not self.uid:
            raise InvalidValueObjectException(
                value_object_type="MessageReference",
                value=self.uid,
                reason="UID cannot be empty"
            )

    @property
    def is_deleted(self) -> bool:
        return DELETED_FLAG in self.flags

    @property
    def is_seen(self) -> bool:
        return SEEN_FLAG in self.flags

    def matches(self, other: "MessageReference") -> bool:
        """
        判断两个引用是否指向同一封邮件

        任一方缺少 Message-ID 时视为不匹配。
        """
        if not self.message_id or not other.message_id:
            return False
        return self.message_id.strip().lower() == other.message_id.strip().lower()
