"""IMAP 邮件存储实现"""

import email
import imaplib
import logging
import re
import ssl
from contextlib import contextmanager
from typing import Generator, List, Optional, Tuple

from domain.mail.services.mail_store import (
    MailFolder,
    MailStore,
    MailStoreAuthenticationError,
    MailStoreConnectionError,
    MailStoreOperationError,
)
from domain.mail.value_objects.message_reference import DELETED_FLAG, MessageReference
from domain.mailbox.value_objects.imap_config import ImapConfig
from infrastructure.mail.services.imap_utf7 import encode_mailbox_name


_FETCH_START = re.compile(rb"^\d+ \(")
_UID_PATTERN = re.compile(rb"UID (\d+)")
_FLAGS_PATTERN = re.compile(rb"FLAGS \(([^)]*)\)")
_SIZE_PATTERN = re.compile(rb"RFC822\.SIZE (\d+)")

SUMMARY_FETCH_ITEMS = "(UID FLAGS RFC822.SIZE BODY.PEEK[HEADER.FIELDS (MESSAGE-ID)])"
FULL_FETCH_ITEMS = "(BODY.PEEK[])"


def quote_mailbox(name: str) -> str:
    """编码并加引号，得到可直接用作 IMAP 参数的文件夹名"""
    encoded = encode_mailbox_name(name)
    escaped = encoded.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class ImapMailFolder(MailFolder):
    """
    基于 imaplib 连接的已选中文件夹

    持有一条独占的 IMAP 连接，close() 时登出。
    所有 imaplib 异常都包装为 MailStoreOperationError。
    """

    def __init__(
        self,
        imap: imaplib.IMAP4,
        name: str,
        readonly: bool,
        logger: Optional[logging.Logger] = None,
    ):
        self._imap = imap
        self._name = name
        self._readonly = readonly
        self._closed = False
        self._logger = logger or logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def _command(self, command: str) -> Generator[None, None, None]:
        if self._closed:
            raise MailStoreOperationError(command, f"folder {self._name} is closed")
        try:
            yield
        except MailStoreOperationError:
            raise
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailStoreOperationError(command, str(e)) from e

    @staticmethod
    def _check(command: str, status: str, data) -> None:
        if status != "OK":
            detail = data[0] if data else b""
            if isinstance(detail, bytes):
                detail = detail.decode("utf-8", errors="replace")
            raise MailStoreOperationError(command, f"{status} {detail}".strip())

    def list_messages(self, unseen_only: bool = False) -> List[MessageReference]:
        criteria = ("UNSEEN", "UNDELETED") if unseen_only else ("UNDELETED",)

        with self._command("SEARCH"):
            status, data = self._imap.uid("SEARCH", *criteria)
        self._check("SEARCH", status, data)

        uids = data[0].split() if data and data[0] else []
        if not uids:
            self._logger.debug(f"No messages found in {self._name}")
            return []

        uid_set = b",".join(uids).decode("ascii")
        with self._command("FETCH"):
            status, data = self._imap.uid("FETCH", uid_set, SUMMARY_FETCH_ITEMS)
        self._check("FETCH", status, data)

        references = [
            ref for ref in self._parse_summaries(data) if not ref.is_deleted
        ]
        self._logger.debug(f"Fetched {len(references)} message summaries from {self._name}")
        return references

    def _parse_summaries(self, data) -> List[MessageReference]:
        """
        解析 UID FETCH 的响应

        imaplib 把带 literal 的响应拆成 (元数据, literal) 元组，
        literal 之后的剩余部分（如 ` FLAGS (...))`）是单独的 bytes，
        需要拼回所属记录。
        """
        records: List[Tuple[bytes, bytes]] = []

        for item in data or []:
            if isinstance(item, tuple):
                records.append((item[0], item[1] or b""))
            elif isinstance(item, bytes) and item:
                if _FETCH_START.match(item) or not records:
                    records.append((item, b""))
                else:
                    meta, header = records[-1]
                    records[-1] = (meta + item, header)

        references: List[MessageReference] = []
        for meta, header in records:
            uid_match = _UID_PATTERN.search(meta)
            if not uid_match:
                continue

            flags_match = _FLAGS_PATTERN.search(meta)
            flags = frozenset(
                flag.decode("ascii", errors="replace")
                for flag in (flags_match.group(1).split() if flags_match else [])
            )

            size_match = _SIZE_PATTERN.search(meta)

            references.append(
                MessageReference(
                    folder=self._name,
                    uid=uid_match.group(1).decode("ascii"),
                    message_id=self._parse_message_id(header),
                    flags=flags,
                    size=int(size_match.group(1)) if size_match else 0,
                )
            )

        return references

    @staticmethod
    def _parse_message_id(header: bytes) -> Optional[str]:
        if not header:
            return None
        headers = email.message_from_bytes(header)
        message_id = headers.get("Message-ID")
        if not message_id:
            return None
        return str(message_id).strip() or None

    def fetch_message(self, uid: str) -> bytes:
        with self._command("FETCH"):
            status, data = self._imap.uid("FETCH", uid, FULL_FETCH_ITEMS)
        self._check("FETCH", status, data)

        for item in data or []:
            if isinstance(item, tuple) and isinstance(item[1], bytes):
                return item[1]

        raise MailStoreOperationError("FETCH", f"message UID {uid} not found in {self._name}")

    def folder_exists(self, name: str) -> bool:
        with self._command("LIST"):
            status, data = self._imap.list('""', quote_mailbox(name))
        if status != "OK":
            return False
        return any(entry for entry in data or [])

    def copy_message(self, uid: str, target_folder: str) -> None:
        with self._command("COPY"):
            status, data = self._imap.uid("COPY", uid, quote_mailbox(target_folder))
        self._check("COPY", status, data)
        self._logger.debug(f"Copied UID {uid} from {self._name} to {target_folder}")

    def flag_deleted(self, uid: str) -> None:
        with self._command("STORE"):
            status, data = self._imap.uid("STORE", uid, "+FLAGS", f"({DELETED_FLAG})")
        self._check("STORE", status, data)

    def close(self, expunge: bool = False) -> None:
        if self._closed:
            return
        self._closed = True

        # CLOSE 会清除 \Deleted 邮件；不需要时直接登出
        if expunge and not self._readonly:
            try:
                if self._imap.state == "SELECTED":
                    self._imap.close()
            except Exception as e:
                self._logger.warning(f"Failed to close {self._name} with expunge: {e}")

        try:
            self._imap.logout()
        except Exception as e:
            self._logger.debug(f"Error during logout: {e}")


class ImapMailStoreImpl(MailStore):
    """
    IMAP 邮件存储实现

    使用 Python 标准库 imaplib 实现，支持：
    - SSL/TLS 安全连接（端口 993）
    - 每次 open_folder 建立独立连接，用完即断开
    - 非 ASCII 文件夹名（modified UTF-7 编码）

    连接失败不重试，由下一次轮询重新连接。
    """

    def __init__(
        self,
        config: ImapConfig,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化 IMAP 邮件存储

        Args:
            config: IMAP 连接配置
            debug: 是否输出 IMAP 协议调试信息
            logger: 可选的日志记录器
        """
        self._config = config
        self._debug = debug
        self._logger = logger or logging.getLogger(__name__)

    @property
    def inbox(self) -> str:
        return self._config.folder

    def open_folder(self, name: Optional[str] = None, readonly: bool = False) -> ImapMailFolder:
        folder_name = name or self._config.folder
        imap = self._connect()

        try:
            status, data = imap.select(quote_mailbox(folder_name), readonly=readonly)
        except (imaplib.IMAP4.error, OSError) as e:
            self._safe_logout(imap)
            raise MailStoreOperationError("SELECT", f"{folder_name}: {e}") from e

        if status != "OK":
            self._safe_logout(imap)
            raise MailStoreOperationError("SELECT", f"{folder_name}: {status}")

        mode = "read-only" if readonly else "read-write"
        self._logger.debug(f"Opened folder {folder_name} ({mode})")
        return ImapMailFolder(imap, folder_name, readonly, logger=self._logger)

    def _connect(self) -> imaplib.IMAP4_SSL:
        """
        建立 IMAP SSL 连接并登录

        Raises:
            MailStoreConnectionError: 连接失败
            MailStoreAuthenticationError: 认证失败
        """
        server = self._config.server
        port = self._config.port

        try:
            context = ssl.create_default_context()

            self._logger.debug(f"Connecting to {server}:{port}")
            imap = imaplib.IMAP4_SSL(
                host=server,
                port=port,
                ssl_context=context,
                timeout=self._config.timeout,
            )
        except Exception as e:
            raise MailStoreConnectionError(
                server=server,
                port=port,
                message=str(e),
            ) from e

        if self._debug:
            imap.debug = 4

        try:
            self._logger.debug(f"Authenticating as {self._config.username}")
            imap.login(self._config.username, self._config.password)
        except imaplib.IMAP4.error as e:
            self._safe_logout(imap)
            raise MailStoreAuthenticationError(
                username=self._config.username,
                message=str(e),
            ) from e
        except OSError as e:
            self._safe_logout(imap)
            raise MailStoreConnectionError(server=server, port=port, message=str(e)) from e

        return imap

    def _safe_logout(self, imap: imaplib.IMAP4) -> None:
        try:
            imap.logout()
        except Exception as e:
            self._logger.debug(f"Error during logout: {e}")
