"""轮询配置值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class PollingConfig(BaseValueObject):
    """
    轮询与线程池配置

    Attributes:
        interval: 两次轮询之间的间隔（秒）
        core_size: 消费队列的 worker 数量
        max_size: 线程池最大线程数
        queue_capacity: 队列容量，满时生产者阻塞
        thread_name_prefix: 线程名前缀
        max_fetch_size: 单次轮询最多投递的邮件数
    """

    interval: float = 5.0
    core_size: int = 1
    max_size: int = 2
    queue_capacity: int = 10
    thread_name_prefix: str = "mail-relay-"
    max_fetch_size: int = 10

    def validate(self) -> None:
        if self.interval <= 0:
            self._invalid("interval", self.interval, "Interval must be positive")

        for name in ("core_size", "max_size", "queue_capacity", "max_fetch_size"):
            value = getattr(self, name)
            if value < 1:
                self._invalid(name, value, f"{name} must be at least 1")

        if self.max_size < self.core_size:
            self._invalid(
                "max_size",
                self.max_size,
                f"max_size ({self.max_size}) must not be less than core_size ({self.core_size})",
            )

    @staticmethod
    def _invalid(name: str, value: object, reason: str) -> None:
        raise InvalidValueObjectException(
            value_object_type="PollingConfig",
            value=value,
            reason=reason,
        )
