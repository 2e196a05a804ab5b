"""
基础设施容器（InfraContainer）

管理邮件存储、发送、解析等技术实现。
依赖 ConfigContainer 获取配置。
"""

from dependency_injector import containers, providers

from infrastructure.mail.services.email_message_parser_impl import EmailMessageParserImpl
from infrastructure.mail.services.imap_mail_store_impl import ImapMailStoreImpl
from infrastructure.mail.services.smtp_mail_sender_impl import SmtpMailSenderImpl


class InfraContainer(containers.DeclarativeContainer):
    """基础设施容器 - 管理技术实现"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # ============ 邮件服务 ============

    # IMAP 邮件存储（每次 open_folder 建立独立连接，可共享）
    mail_store = providers.Singleton(
        ImapMailStoreImpl,
        config=config.imap_config,
        debug=config.settings.provided.mail_debug,
    )

    # SMTP 发送服务
    mail_sender = providers.Singleton(
        SmtpMailSenderImpl,
        config=config.smtp_config,
        debug=config.settings.provided.mail_debug,
    )

    # MIME 解析服务
    mail_message_parser = providers.Singleton(EmailMessageParserImpl)
