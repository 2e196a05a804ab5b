"""
配置容器（ConfigContainer）

提供 Settings 单例及由其派生的各领域配置值对象。
"""

from dependency_injector import containers, providers

from infrastructure.config.settings import Settings, get_settings


class ConfigContainer(containers.DeclarativeContainer):
    """配置容器 - 管理配置"""

    settings: providers.Singleton[Settings] = providers.Singleton(get_settings)

    imap_config = providers.Singleton(lambda settings: settings.imap_config(), settings=settings)

    smtp_config = providers.Singleton(lambda settings: settings.smtp_config(), settings=settings)

    forwarding_config = providers.Singleton(
        lambda settings: settings.forwarding_config(), settings=settings
    )

    polling_config = providers.Singleton(
        lambda settings: settings.polling_config(), settings=settings
    )
