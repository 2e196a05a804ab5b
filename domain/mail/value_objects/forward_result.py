"""转发结果值对象"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from domain.common.base_value_object import BaseValueObject
from domain.mail.value_objects.message_reference import MessageReference


class ForwardStatus(str, Enum):
    """单封邮件的处理结果"""

    FORWARDED = "forwarded"
    """已转发、已标记删除"""

    SKIPPED = "skipped"
    """未匹配到邮件，未做任何修改"""

    FAILED = "failed"
    """处理失败，邮件保持原状，下次轮询重试"""


class FailureKind(str, Enum):
    """失败分类"""

    CONNECTION = "connection"
    PARSE = "parse"
    SEND = "send"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ForwardResult(BaseValueObject):
    """
    单封邮件的转发结果

    转发服务不向外抛出异常，所有结局都以该值对象返回，
    由轮询器汇总到 PollCycleReport。

    Attributes:
        reference: 处理的邮件引用
        status: 处理结果
        archived: 是否已复制到归档文件夹
        failure_kind: 失败分类（仅 FAILED）
        error: 错误描述、跳过原因或归档失败原因
    """

    reference: MessageReference
    status: ForwardStatus
    archived: bool = False
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None

    @classmethod
    def forwarded(
        cls,
        reference: MessageReference,
        archived: bool,
        error: Optional[str] = None,
    ) -> "ForwardResult":
        """error 仅记录归档失败的原因，不影响 FORWARDED 状态"""
        return cls(
            reference=reference,
            status=ForwardStatus.FORWARDED,
            archived=archived,
            error=error,
        )

    @classmethod
    def skipped(cls, reference: MessageReference, reason: str) -> "ForwardResult":
        return cls(reference=reference, status=ForwardStatus.SKIPPED, error=reason)

    @classmethod
    def failed(
        cls,
        reference: MessageReference,
        kind: FailureKind,
        error: str,
    ) -> "ForwardResult":
        return cls(
            reference=reference,
            status=ForwardStatus.FAILED,
            failure_kind=kind,
            error=error,
        )

    @property
    def is_forwarded(self) -> bool:
        return self.status == ForwardStatus.FORWARDED

    @property
    def is_failed(self) -> bool:
        return self.status == ForwardStatus.FAILED
