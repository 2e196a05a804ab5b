"""邮件转发服务"""

import logging
from typing import List, Optional, Tuple

from domain.mail.services.mail_message_parser import MailMessageParser, MailParseError
from domain.mail.services.mail_sender import MailSender, MailSendError
from domain.mail.services.mail_store import MailFolder, MailStore, MailStoreError
from domain.mail.value_objects.forward_result import FailureKind, ForwardResult
from domain.mail.value_objects.forwarding_config import ForwardingConfig
from domain.mail.value_objects.message_reference import MessageReference
from domain.mail.value_objects.outgoing_mail import OutgoingMail
from domain.mail.value_objects.parsed_email import ParsedEmail


class MailForwardingService:
    """
    邮件转发服务

    处理轮询器投递的单封邮件：
    1. 以读写方式重新打开邮件所在文件夹
    2. 批量获取文件夹内邮件的元数据，按 Message-ID（忽略大小写）匹配，
       每次只处理一封（同 Message-ID 优先取引用的 UID）
    3. 解析匹配到的邮件，转发简化副本（主题 + 纯文本正文）
    4. 复制到归档文件夹（仅当该文件夹已存在，失败只记录日志）
    5. 标记 \\Deleted，关闭文件夹时 expunge

    发送、归档、删除都作用于同一个匹配到的 UID。
    发送之前的任何失败都不修改邮件，留在原处等待下次轮询；
    发送成功后一定打删除标记，归档失败不会导致重复转发。
    任何错误都转换为 ForwardResult 返回，不向外抛出。
    """

    def __init__(
        self,
        mail_store: MailStore,
        mail_sender: MailSender,
        parser: MailMessageParser,
        config: ForwardingConfig,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化转发服务

        Args:
            mail_store: 邮件存储
            mail_sender: 邮件发送服务
            parser: MIME 解析服务
            config: 转发配置（固定收件人、发件人、归档文件夹）
            logger: 可选的日志记录器
        """
        self._mail_store = mail_store
        self._mail_sender = mail_sender
        self._parser = parser
        self._config = config
        self._logger = logger or logging.getLogger(__name__)

    def forward(self, reference: MessageReference) -> ForwardResult:
        """
        转发单封邮件

        Args:
            reference: 轮询器发现的邮件引用

        Returns:
            ForwardResult 处理结果
        """
        if not reference.message_id:
            self._logger.warning(
                f"Message UID {reference.uid} in {reference.folder} has no Message-ID, skipping"
            )
            return ForwardResult.skipped(reference, "missing Message-ID")

        try:
            with self._mail_store.open_folder(reference.folder, readonly=False) as folder:
                return self._forward_in_folder(folder, reference)

        except MailStoreError as e:
            self._logger.error(f"Mail store error while handling {reference.message_id}: {e}")
            return ForwardResult.failed(reference, FailureKind.CONNECTION, str(e))

        except MailParseError as e:
            self._logger.error(f"Failed to parse {reference.message_id}: {e}")
            return ForwardResult.failed(reference, FailureKind.PARSE, str(e))

        except MailSendError as e:
            self._logger.error(f"Failed to forward {reference.message_id}: {e}")
            return ForwardResult.failed(reference, FailureKind.SEND, str(e))

        except Exception as e:
            self._logger.exception(f"Unexpected error while handling {reference.message_id}: {e}")
            return ForwardResult.failed(reference, FailureKind.UNEXPECTED, str(e))

    def _forward_in_folder(self, folder: MailFolder, reference: MessageReference) -> ForwardResult:
        matched = self._match(folder.list_messages(), reference)
        if matched is None:
            self._logger.debug(
                f"Message {reference.message_id} no longer present in {folder.name}, skipping"
            )
            return ForwardResult.skipped(reference, "message not found in folder")

        parsed = self._parser.parse(folder.fetch_message(matched.uid))
        self._show_mail_content(parsed)

        self._mail_sender.send(
            OutgoingMail(
                to_address=self._config.recipient,
                from_address=self._config.sender,
                subject=parsed.subject,
                body=parsed.content.plain_text,
            )
        )

        # 已发送：无论归档结果如何都要删除，否则下次轮询会重复转发
        archived, archive_error = self._archive(folder, matched)
        folder.flag_deleted(matched.uid)

        self._logger.info(
            f"Forwarded {matched.message_id} to {self._config.recipient}"
            f"{' (archived)' if archived else ''}"
        )
        return ForwardResult.forwarded(matched, archived=archived, error=archive_error)

    @staticmethod
    def _match(
        candidates: List[MessageReference],
        reference: MessageReference,
    ) -> Optional[MessageReference]:
        """
        在文件夹当前邮件中找到引用对应的那一封

        Message-ID 重复时优先取 UID 相同的一封，否则取第一封；
        其余同 Message-ID 的邮件由后续轮询各自处理。
        """
        matches = [candidate for candidate in candidates if candidate.matches(reference)]
        for candidate in matches:
            if candidate.uid == reference.uid:
                return candidate
        return matches[0] if matches else None

    def _archive(
        self,
        folder: MailFolder,
        reference: MessageReference,
    ) -> Tuple[bool, Optional[str]]:
        """
        复制邮件到归档文件夹

        在打删除标记之前复制，归档副本不会带上 \\Deleted。
        复制失败只记录日志，不阻止删除。

        Returns:
            (是否已复制, 复制失败的原因)
        """
        archive_folder = self._config.archive_folder

        try:
            if not folder.folder_exists(archive_folder):
                self._logger.debug(f"Archive folder {archive_folder} does not exist, not archiving")
                return False, None

            folder.copy_message(reference.uid, archive_folder)
        except MailStoreError as e:
            self._logger.error(
                f"Failed to archive {reference.message_id} to {archive_folder}, "
                f"deleting anyway: {e}"
            )
            return False, str(e)

        return True, None

    def _show_mail_content(self, parsed: ParsedEmail) -> None:
        self._logger.debug(
            f"From: {parsed.from_address} to: {', '.join(parsed.to_addresses)} "
            f"| Subject: {parsed.subject}"
        )
        self._logger.debug(f"Mail content: {parsed.body_text}")
        self._logger.debug(f"Mail html: {parsed.body_html}")
