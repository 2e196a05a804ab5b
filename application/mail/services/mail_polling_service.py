"""邮件轮询服务接口"""

from abc import ABC, abstractmethod
from typing import Optional

from domain.mail.value_objects.poll_cycle_report import PollCycleReport


class MailPollingService(ABC):
    """
    邮件轮询服务接口

    定义邮件轮询调度器的契约，负责：
    - 按固定延迟轮询收件箱
    - 将发现的邮件投递给转发服务
    - 汇总每个周期的处理结果
    - 优雅启动和停止
    """

    DEFAULT_INTERVAL: float = 5.0  # 默认轮询间隔（秒）

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """检查轮询服务是否正在运行"""
        raise NotImplementedError

    @property
    @abstractmethod
    def interval(self) -> float:
        """获取轮询间隔（秒）"""
        raise NotImplementedError

    @property
    @abstractmethod
    def last_report(self) -> Optional[PollCycleReport]:
        """最近一次完成的轮询周期报告，尚未轮询时为 None"""
        raise NotImplementedError

    @abstractmethod
    async def run_cycle(self) -> PollCycleReport:
        """
        执行一个完整的轮询周期

        列举收件箱、投递所有邮件并等待处理完成。
        不依赖定时器，可单独调用。
        """
        raise NotImplementedError

    @abstractmethod
    async def start(self) -> None:
        """
        启动轮询服务

        启动后立即执行第一次轮询，之后按配置的间隔周期性执行。
        如果服务已在运行，则不会重复启动。
        """
        raise NotImplementedError

    @abstractmethod
    async def stop(self) -> None:
        """
        停止轮询服务

        如果服务未运行，则此方法无效。
        """
        raise NotImplementedError
