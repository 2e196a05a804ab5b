"""转发配置值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


DEFAULT_ARCHIVE_FOLDER = "архив"


@dataclass(frozen=True)
class ForwardingConfig(BaseValueObject):
    """
    转发配置

    转发邮件的收件人和发件人是固定地址，与原邮件的参与者无关。

    Attributes:
        recipient: 转发目标地址
        sender: 转发邮件的发件人
        archive_folder: 归档文件夹名称，不存在时不归档
    """

    recipient: str
    sender: str
    archive_folder: str = DEFAULT_ARCHIVE_FOLDER

    def validate(self) -> None:
        for name, value in (("recipient", self.recipient), ("sender", self.sender)):
            if not value or "@" not in value:
                raise InvalidValueObjectException(
                    value_object_type="ForwardingConfig",
                    value=value,
                    reason=f"Invalid {name} address: {value!r}"
                )

        if not self.archive_folder or not self.archive_folder.strip():
            raise InvalidValueObjectException(
                value_object_type="ForwardingConfig",
                value=self.archive_folder,
                reason="Archive folder cannot be empty"
            )
