"""异步邮件轮询服务实现 - 生产者/消费者队列"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple, TypeVar

from application.mail.services.mail_forwarding_service import MailForwardingService
from application.mail.services.mail_polling_service import MailPollingService
from domain.mail.services.mail_store import MailStore
from domain.mail.value_objects.forward_result import FailureKind, ForwardResult
from domain.mail.value_objects.message_reference import MessageReference
from domain.mail.value_objects.poll_cycle_report import PollCycleReport
from domain.mail.value_objects.polling_config import PollingConfig


T = TypeVar("T")

WorkItem = Tuple[MessageReference, PollCycleReport]


class AsyncMailPollingService(MailPollingService):
    """
    异步邮件轮询服务实现

    使用 asyncio 实现固定延迟轮询，支持：
    - 定时生产者：每个周期列举收件箱中的未读邮件，逐封放入有界队列
    - 每周期最多投递 max_fetch_size 封，窗口按 UID 轮转
    - 固定数量的 worker 消费队列，在线程池中执行阻塞的转发
    - 队列满时生产者等待，形成背压
    - 一个周期的邮件全部处理完才开始等待下一个周期
    - 列举失败只放弃当前周期，下一周期照常进行
    - worker 中逃逸的异常记录日志后继续
    """

    def __init__(
        self,
        mail_store: MailStore,
        forwarding_service: MailForwardingService,
        config: Optional[PollingConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化异步邮件轮询服务

        Args:
            mail_store: 邮件存储，用于列举收件箱
            forwarding_service: 单封邮件转发服务
            config: 轮询与线程池配置
            logger: 可选的日志记录器
        """
        self._mail_store = mail_store
        self._forwarding_service = forwarding_service
        self._config = config or PollingConfig()
        self._logger = logger or logging.getLogger(__name__)

        self._queue: Optional["asyncio.Queue[WorkItem]"] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._workers: List[asyncio.Task] = []
        self._task: Optional[asyncio.Task] = None
        self._running = False

        self._poll_count = 0
        self._uid_cursor = 0
        self._last_report: Optional[PollCycleReport] = None

    @property
    def is_running(self) -> bool:
        """检查轮询服务是否正在运行"""
        return self._running and self._task is not None

    @property
    def interval(self) -> float:
        """获取轮询间隔（秒）"""
        return self._config.interval

    @property
    def config(self) -> PollingConfig:
        return self._config

    @property
    def poll_count(self) -> int:
        """已执行的轮询周期数"""
        return self._poll_count

    @property
    def last_report(self) -> Optional[PollCycleReport]:
        return self._last_report

    async def start(self) -> None:
        """
        启动轮询服务

        创建有界队列、线程池和 worker，随后启动轮询循环。
        """
        if self._running:
            self._logger.warning("Polling service already running")
            return

        self._running = True
        self._queue = asyncio.Queue(maxsize=self._config.queue_capacity)
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.max_size,
            thread_name_prefix=self._config.thread_name_prefix,
        )
        self._workers = [
            asyncio.create_task(self._worker(index))
            for index in range(self._config.core_size)
        ]
        self._task = asyncio.create_task(self._polling_loop())
        self._logger.info(
            f"Mail polling service started "
            f"(interval={self._config.interval}s, "
            f"workers={self._config.core_size}, "
            f"threads={self._config.max_size}, "
            f"queue_capacity={self._config.queue_capacity})"
        )

    async def stop(self) -> None:
        """
        停止轮询服务

        取消轮询循环和 worker，关闭线程池，不等待进行中的阻塞调用。
        """
        self._running = False

        tasks = [task for task in [self._task, *self._workers] if task is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._task = None
        self._workers = []
        self._queue = None

        if self._executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

        self._logger.info("Mail polling service stopped")

    async def _polling_loop(self) -> None:
        """轮询主循环"""
        # 启动后立即执行第一次轮询
        await self.run_cycle()

        while self._running:
            await asyncio.sleep(self._config.interval)
            if self._running:  # 再次检查，防止 sleep 期间被停止
                await self.run_cycle()

    async def run_cycle(self) -> PollCycleReport:
        """
        执行一个完整的轮询周期

        服务已启动时经由队列交给 worker 处理；
        未启动时在当前协程中逐封处理。
        """
        self._poll_count += 1
        report = PollCycleReport(
            cycle=self._poll_count,
            started_at=datetime.now(timezone.utc),
        )
        self._logger.debug(f"Starting mail polling cycle #{report.cycle}")

        try:
            references = await self._run_blocking(self._list_inbox)
        except Exception as e:
            self._logger.error(f"Failed to list messages in {self._mail_store.inbox}: {e}")
            report.listing_error = str(e)
            return self._finish(report)

        report.discovered = len(references)
        if references:
            self._logger.info(f"Found {len(references)} new message(s) in {self._mail_store.inbox}")

        dispatchable = []
        for reference in references:
            if reference.message_id:
                dispatchable.append(reference)
            else:
                # 无法按 Message-ID 匹配，不占用本周期的名额
                self._logger.debug(f"Message UID {reference.uid} has no Message-ID, not dispatching")
                report.add(ForwardResult.skipped(reference, "missing Message-ID"))

        batch = self._next_batch(dispatchable)

        if self._queue is not None and self._workers:
            for reference in batch:
                await self._queue.put((reference, report))
            await self._queue.join()
        else:
            for reference in batch:
                report.add(await self._handle(reference))

        return self._finish(report)

    def _next_batch(self, references: List[MessageReference]) -> List[MessageReference]:
        """
        取本周期要投递的邮件，最多 max_fetch_size 封

        从上一周期最后投递的 UID 之后开始取，到末尾后回绕，
        反复失败的邮件不会一直占住窗口。
        """
        limit = self._config.max_fetch_size
        if len(references) <= limit:
            batch = references
        else:
            ordered = sorted(references, key=_uid_key)
            after = [ref for ref in ordered if _uid_key(ref) > self._uid_cursor]
            before = [ref for ref in ordered if _uid_key(ref) <= self._uid_cursor]
            batch = (after + before)[:limit]

        if batch:
            self._uid_cursor = _uid_key(batch[-1])
        return batch

    def _finish(self, report: PollCycleReport) -> PollCycleReport:
        report.finished_at = datetime.now(timezone.utc)
        self._last_report = report

        if report.abandoned or report.failed_count:
            self._logger.warning(f"Polling {report.summary()}")
        elif report.discovered:
            self._logger.info(f"Polling {report.summary()}")
        else:
            self._logger.debug(f"Polling {report.summary()}")

        return report

    def _list_inbox(self) -> List[MessageReference]:
        with self._mail_store.open_folder(readonly=True) as folder:
            return folder.list_messages(unseen_only=True)

    async def _worker(self, index: int) -> None:
        """队列消费者"""
        assert self._queue is not None
        queue = self._queue

        while True:
            reference, report = await queue.get()
            try:
                report.add(await self._handle(reference))
            finally:
                queue.task_done()

    async def _handle(self, reference: MessageReference) -> ForwardResult:
        try:
            return await self._run_blocking(self._forwarding_service.forward, reference)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # forward() 本身不抛异常，这里兜底线程池层面的错误
            self._logger.exception(f"Uncaught error while handling UID {reference.uid}: {e}")
            return ForwardResult.failed(reference, FailureKind.UNEXPECTED, str(e))

    async def _run_blocking(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)


def _uid_key(reference: MessageReference) -> int:
    return int(reference.uid) if reference.uid.isdigit() else 0
