"""轮询周期报告"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from domain.mail.value_objects.forward_result import ForwardResult, ForwardStatus


@dataclass
class PollCycleReport:
    """
    单个轮询周期的结果汇总

    周期内由多个 worker 追加结果，周期结束后只读。

    Attributes:
        cycle: 周期序号（从 1 开始）
        started_at: 开始时间
        discovered: 本周期发现的邮件数
        listing_error: 列举邮件失败时的错误描述，周期随之放弃
        results: 每封邮件的转发结果
    """

    cycle: int
    started_at: datetime
    discovered: int = 0
    listing_error: Optional[str] = None
    results: List[ForwardResult] = field(default_factory=list)
    finished_at: Optional[datetime] = None

    def add(self, result: ForwardResult) -> None:
        self.results.append(result)

    def _count(self, status: ForwardStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def forwarded_count(self) -> int:
        return self._count(ForwardStatus.FORWARDED)

    @property
    def skipped_count(self) -> int:
        return self._count(ForwardStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(ForwardStatus.FAILED)

    @property
    def abandoned(self) -> bool:
        return self.listing_error is not None

    @property
    def duration(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def summary(self) -> str:
        if self.abandoned:
            return f"cycle #{self.cycle} abandoned: {self.listing_error}"
        return (
            f"cycle #{self.cycle}: {self.discovered} discovered, "
            f"{self.forwarded_count} forwarded, {self.skipped_count} skipped, "
            f"{self.failed_count} failed, {self.duration:.2f}s"
        )
