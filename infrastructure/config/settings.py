"""
应用配置管理

使用 pydantic-settings 管理环境变量和配置
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.mail.value_objects.forwarding_config import DEFAULT_ARCHIVE_FOLDER, ForwardingConfig
from domain.mail.value_objects.polling_config import PollingConfig
from domain.mailbox.value_objects.imap_config import ImapConfig
from domain.mailbox.value_objects.smtp_config import SmtpConfig


class Settings(BaseSettings):
    """
    应用配置类

    自动从环境变量和 .env 文件读取配置，
    再通过 *_config() 方法转换为领域值对象交给各服务构造函数。
    """

    # ========== 应用环境 ==========
    app_env: Literal["test", "dev", "prod"] = "dev"
    app_name: str = "mail-relay"
    app_version: str = "1.0.0"

    # ========== IMAP 收件配置 ==========
    mail_imap_username: str = ""
    mail_imap_password: str = ""
    mail_imap_host: str = ""
    mail_imap_port: int = 993
    mail_imap_folder: str = "INBOX"

    # ========== SMTP 发信配置 ==========
    mail_smtp_username: str = ""
    mail_smtp_password: str = ""
    mail_smtp_host: str = ""
    mail_smtp_port: int = 587
    mail_smtp_protocol: Literal["smtp", "smtps"] = "smtp"
    mail_smtp_starttls: bool = True

    # ========== 转发配置 ==========
    mail_forward_to: str = ""
    mail_forward_from: str = ""
    mail_archive_folder: str = DEFAULT_ARCHIVE_FOLDER

    # ========== 轮询配置 ==========
    mail_polling_interval: float = Field(default=5.0, gt=0)
    mail_max_fetch_size: int = Field(default=10, ge=1)
    mail_timeout: float = 30.0
    mail_debug: bool = False  # 输出 IMAP/SMTP 协议调试信息

    # ========== 线程池配置 ==========
    task_pool_core_size: int = Field(default=1, ge=1)
    task_pool_max_size: int = Field(default=2, ge=1)
    task_pool_queue_capacity: int = Field(default=10, ge=1)
    task_thread_name_prefix: str = "mail-relay-"

    # ========== 日志配置 ==========
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/mail-relay.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    def imap_config(self) -> ImapConfig:
        """构造 IMAP 连接配置"""
        return ImapConfig(
            server=self.mail_imap_host,
            username=self.mail_imap_username,
            password=self.mail_imap_password,
            port=self.mail_imap_port,
            folder=self.mail_imap_folder,
            timeout=self.mail_timeout,
        )

    def smtp_config(self) -> SmtpConfig:
        """构造 SMTP 发信配置"""
        return SmtpConfig(
            server=self.mail_smtp_host,
            username=self.mail_smtp_username,
            password=self.mail_smtp_password,
            port=self.mail_smtp_port,
            protocol=self.mail_smtp_protocol,
            starttls=self.mail_smtp_starttls,
            timeout=self.mail_timeout,
        )

    def forwarding_config(self) -> ForwardingConfig:
        """构造转发配置"""
        return ForwardingConfig(
            recipient=self.mail_forward_to,
            sender=self.mail_forward_from,
            archive_folder=self.mail_archive_folder,
        )

    def polling_config(self) -> PollingConfig:
        """构造轮询与线程池配置"""
        return PollingConfig(
            interval=self.mail_polling_interval,
            core_size=self.task_pool_core_size,
            max_size=self.task_pool_max_size,
            queue_capacity=self.task_pool_queue_capacity,
            thread_name_prefix=self.task_thread_name_prefix,
            max_fetch_size=self.mail_max_fetch_size,
        )


# 全局配置实例（单例）
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    获取配置实例（单例模式）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
