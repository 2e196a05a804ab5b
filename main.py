"""
Mail Relay - 邮件转发服务入口

轮询 IMAP 收件箱，将每封未读邮件的主题和纯文本正文转发到固定地址，
原邮件复制到归档文件夹后从收件箱删除。

运行：
    uv run python main.py

或使用安装后的命令：
    uv run mail-relay
"""

import asyncio
import signal
import sys

from pydantic import ValidationError

from common.logging import configure_logging, get_logger
from domain.common.exceptions import InvalidValueObjectException
from infrastructure.config.settings import get_settings
from infrastructure.containers import bootstrap

logger = get_logger("mail_relay")


async def serve() -> None:
    """启动轮询服务并运行到收到终止信号"""
    boot = bootstrap()
    settings = boot.config.settings()

    logger.info(f"IMAP connection url: {boot.config.imap_config().masked_connection_string}")
    logger.info(
        f"Forwarding to {settings.mail_forward_to} "
        f"via {settings.mail_smtp_host}:{settings.mail_smtp_port}"
    )

    polling_service = boot.app.mail_polling_service()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows 不支持 add_signal_handler，依赖 KeyboardInterrupt
            pass

    await polling_service.start()
    try:
        await stop_event.wait()
    finally:
        await polling_service.stop()


def run() -> int:
    """命令行入口"""
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(level=settings.log_level, log_file=settings.log_file)
    logger.info(f"Starting {settings.app_name} {settings.app_version} ({settings.app_env})")

    try:
        asyncio.run(serve())
    except InvalidValueObjectException as e:
        logger.error(f"Invalid configuration: {e.message}")
        return 1
    except KeyboardInterrupt:
        pass

    logger.info("Mail relay stopped")
    return 0


if __name__ == "__main__":
    sys.exit(run())
