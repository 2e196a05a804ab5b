"""待发送邮件值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class OutgoingMail(BaseValueObject):
    """
    待发送的简化邮件

    Attributes:
        to_address: 收件人
        from_address: 发件人
        subject: 主题
        body: 纯文本正文
    """

    to_address: str
    from_address: str
    subject: str = ""
    body: str = ""

    def validate(self) -> None:
        for name, value in (("to_address", self.to_address), ("from_address", self.from_address)):
            if not value or "@" not in value:
                raise InvalidValueObjectException(
                    value_object_type="OutgoingMail",
                    value=value,
                    reason=f"Invalid {name}: {value!r}"
                )
