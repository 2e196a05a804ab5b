"""
应用容器（AppContainer）

管理应用层服务：邮件转发服务、邮件轮询服务。
依赖 InfraContainer 获取基础设施。
"""

from dependency_injector import containers, providers

from application.mail.services.async_mail_polling_service import AsyncMailPollingService
from application.mail.services.mail_forwarding_service import MailForwardingService


class AppContainer(containers.DeclarativeContainer):
    """应用容器 - 管理应用层服务"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # 依赖基础设施容器
    infra = providers.DependenciesContainer()

    # ============ 应用服务 ============

    # 邮件转发服务
    mail_forwarding_service = providers.Singleton(
        MailForwardingService,
        mail_store=infra.mail_store,
        mail_sender=infra.mail_sender,
        parser=infra.mail_message_parser,
        config=config.forwarding_config,
    )

    # 邮件轮询服务（单例，整个应用只需一个实例）
    mail_polling_service = providers.Singleton(
        AsyncMailPollingService,
        mail_store=infra.mail_store,
        forwarding_service=mail_forwarding_service,
        config=config.polling_config,
    )
