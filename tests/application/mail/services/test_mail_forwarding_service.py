"""MailForwardingService 单元测试 - 使用内存邮件存储"""

from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest

from application.mail.services.mail_forwarding_service import MailForwardingService
from domain.mail.services.mail_message_parser import MailMessageParser, MailParseError
from domain.mail.services.mail_sender import MailSendError
from domain.mail.services.mail_store import (
    MailFolder,
    MailStore,
    MailStoreConnectionError,
    MailStoreOperationError,
)
from domain.mail.value_objects.forward_result import FailureKind, ForwardStatus
from domain.mail.value_objects.forwarding_config import ForwardingConfig
from domain.mail.value_objects.message_reference import DELETED_FLAG, MessageReference
from infrastructure.mail.services.email_message_parser_impl import EmailMessageParserImpl


class InMemoryMessage:
    def __init__(self, uid: str, message_id: Optional[str], raw: bytes):
        self.uid = uid
        self.message_id = message_id
        self.raw = raw
        self.flags = set()


class InMemoryFolder(MailFolder):
    """内存文件夹，记录关闭和 expunge"""

    def __init__(self, store: "InMemoryMailStore", name: str, readonly: bool):
        self._store = store
        self._name = name
        self._readonly = readonly
        self.closed = False
        self.expunged = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def _messages(self) -> List[InMemoryMessage]:
        return self._store.folders[self._name]

    def _find(self, uid: str) -> InMemoryMessage:
        for message in self._messages:
            if message.uid == uid:
                return message
        raise MailStoreOperationError("FETCH", f"no message with UID {uid}")

    def list_messages(self, unseen_only=False):
        refs = [
            MessageReference(
                folder=self._name,
                uid=message.uid,
                message_id=message.message_id,
                flags=frozenset(message.flags),
            )
            for message in self._messages
            if DELETED_FLAG not in message.flags
        ]
        return refs

    def fetch_message(self, uid: str) -> bytes:
        return self._find(uid).raw

    def folder_exists(self, name: str) -> bool:
        return name in self._store.folders

    def copy_message(self, uid: str, target_folder: str) -> None:
        if self._store.fail_copy:
            raise MailStoreOperationError("COPY", "NO [TRYCREATE] copy failed")
        source = self._find(uid)
        # 与 IMAP COPY 一样保留标记
        copy = InMemoryMessage(source.uid, source.message_id, source.raw)
        copy.flags = set(source.flags)
        self._store.folders[target_folder].append(copy)

    def flag_deleted(self, uid: str) -> None:
        self._find(uid).flags.add(DELETED_FLAG)

    def close(self, expunge: bool = False) -> None:
        if self.closed:
            return
        self.closed = True
        if expunge and not self._readonly:
            self.expunged = True
            self._store.folders[self._name] = [
                m for m in self._messages if DELETED_FLAG not in m.flags
            ]


class InMemoryMailStore(MailStore):
    def __init__(self, folders: Dict[str, List[InMemoryMessage]]):
        self.folders = folders
        self.opened: List[InMemoryFolder] = []
        self.fail_copy = False

    @property
    def inbox(self) -> str:
        return "INBOX"

    def open_folder(self, name=None, readonly=False):
        folder = InMemoryFolder(self, name or self.inbox, readonly)
        self.opened.append(folder)
        return folder


def create_raw(message_id: str, subject: str = "Invoice", body: str = "Please see attached") -> bytes:
    return (
        f"From: sender@example.com\r\n"
        f"To: relay@example.com\r\n"
        f"Subject: {subject}\r\n"
        f"Message-ID: {message_id}\r\n"
        f"Content-Type: text/plain; charset=utf-8\r\n"
        f"\r\n"
        f"{body}"
    ).encode("utf-8")


def create_message(uid: str, message_id: str, **kwargs) -> InMemoryMessage:
    return InMemoryMessage(uid, message_id, create_raw(message_id, **kwargs))


def create_reference(uid: str = "1", message_id: Optional[str] = "<a@example.com>") -> MessageReference:
    return MessageReference(folder="INBOX", uid=uid, message_id=message_id)


@pytest.fixture
def config():
    return ForwardingConfig(
        recipient="inbox@example.org",
        sender="relay@example.com",
        archive_folder="архив",
    )


@pytest.fixture
def mail_sender():
    return Mock()


@pytest.fixture
def store():
    return InMemoryMailStore(
        {
            "INBOX": [create_message("1", "<a@example.com>")],
            "архив": [],
        }
    )


@pytest.fixture
def service(store, mail_sender, config):
    return MailForwardingService(
        mail_store=store,
        mail_sender=mail_sender,
        parser=EmailMessageParserImpl(),
        config=config,
    )


class TestForwarding:
    """正常转发流程测试"""

    def test_forwards_subject_and_plain_body(self, service, mail_sender):
        result = service.forward(create_reference())

        assert result.status == ForwardStatus.FORWARDED
        mail = mail_sender.send.call_args.args[0]
        assert mail.to_address == "inbox@example.org"
        assert mail.from_address == "relay@example.com"
        assert mail.subject == "Invoice"
        assert mail.body == "Please see attached"

    def test_archives_and_removes_from_inbox(self, service, store):
        result = service.forward(create_reference())

        assert result.archived
        assert [m.message_id for m in store.folders["архив"]] == ["<a@example.com>"]
        assert store.folders["INBOX"] == []

    def test_opens_folder_read_write_and_expunges(self, service, store):
        service.forward(create_reference())

        assert len(store.opened) == 1
        assert not store.opened[0].readonly
        assert store.opened[0].expunged

    def test_only_matching_message_is_forwarded(self, store, service, mail_sender):
        """测试多封邮件中只处理 Message-ID 匹配的那一封"""
        store.folders["INBOX"] = [
            create_message("1", "<a@example.com>", subject="A"),
            create_message("2", "<B@Example.com>", subject="B"),
            create_message("3", "<c@example.com>", subject="C"),
        ]

        result = service.forward(create_reference(uid="2", message_id="<b@example.com>"))

        assert result.is_forwarded
        assert mail_sender.send.call_count == 1
        assert mail_sender.send.call_args.args[0].subject == "B"
        assert [m.uid for m in store.folders["INBOX"]] == ["1", "3"]
        assert [m.uid for m in store.folders["архив"]] == ["2"]

    def test_missing_archive_folder_is_not_an_error(self, service, store):
        del store.folders["архив"]

        result = service.forward(create_reference())

        assert result.status == ForwardStatus.FORWARDED
        assert not result.archived
        assert "архив" not in store.folders
        assert store.folders["INBOX"] == []

    def test_html_only_message_forwards_empty_body(self, service, store, mail_sender):
        store.folders["INBOX"] = [
            InMemoryMessage(
                "1",
                "<a@example.com>",
                b"Subject: Html\r\nMessage-ID: <a@example.com>\r\n"
                b"Content-Type: text/html\r\n\r\n<b>hi</b>",
            )
        ]

        service.forward(create_reference())

        assert mail_sender.send.call_args.args[0].body == ""

    def test_archive_copy_is_not_flagged_deleted(self, service, store):
        service.forward(create_reference())

        assert DELETED_FLAG not in store.folders["архив"][0].flags

    def test_duplicate_message_id_prefers_referenced_uid(self, store, service, mail_sender):
        """测试 Message-ID 重复时处理引用的那一封，另一封留给后续轮询"""
        store.folders["INBOX"] = [
            create_message("1", "<dup@example.com>", subject="first"),
            create_message("2", "<dup@example.com>", subject="second"),
        ]

        result = service.forward(create_reference(uid="2", message_id="<dup@example.com>"))

        assert result.reference.uid == "2"
        assert mail_sender.send.call_args.args[0].subject == "second"
        assert [m.uid for m in store.folders["INBOX"]] == ["1"]

        service.forward(create_reference(uid="1", message_id="<dup@example.com>"))

        assert mail_sender.send.call_count == 2
        assert store.folders["INBOX"] == []


class TestSkipping:
    """跳过场景测试"""

    def test_missing_message_id_skips_without_connecting(self, service, store, mail_sender):
        result = service.forward(create_reference(message_id=None))

        assert result.status == ForwardStatus.SKIPPED
        assert store.opened == []
        mail_sender.send.assert_not_called()

    def test_message_no_longer_present(self, service, store, mail_sender):
        result = service.forward(create_reference(message_id="<gone@example.com>"))

        assert result.status == ForwardStatus.SKIPPED
        mail_sender.send.assert_not_called()
        assert len(store.folders["INBOX"]) == 1
        assert store.folders["архив"] == []

    def test_already_deleted_message_is_not_forwarded_twice(self, service, store, mail_sender):
        store.folders["INBOX"][0].flags.add(DELETED_FLAG)

        result = service.forward(create_reference())

        assert result.status == ForwardStatus.SKIPPED
        mail_sender.send.assert_not_called()


class TestFailures:
    """失败场景测试：邮件保持原状"""

    def test_send_failure_keeps_message(self, service, store, mail_sender):
        mail_sender.send.side_effect = MailSendError("smtp.example.com:587", "Connection refused")

        result = service.forward(create_reference())

        assert result.is_failed
        assert result.failure_kind == FailureKind.SEND
        message = store.folders["INBOX"][0]
        assert DELETED_FLAG not in message.flags
        assert store.folders["архив"] == []
        assert store.opened[0].closed

    def test_archive_failure_does_not_forward_twice(self, service, store, mail_sender):
        """测试归档失败时邮件仍被删除，第二次处理不会重复发送"""
        store.fail_copy = True

        first = service.forward(create_reference())
        second = service.forward(create_reference())

        assert first.status == ForwardStatus.FORWARDED
        assert not first.archived
        assert "copy failed" in first.error
        assert second.status == ForwardStatus.SKIPPED
        assert mail_sender.send.call_count == 1
        assert store.folders["INBOX"] == []
        assert store.folders["архив"] == []


    def test_parse_failure(self, store, mail_sender, config):
        parser = Mock(spec=MailMessageParser)
        parser.parse.side_effect = MailParseError("Empty message")
        service = MailForwardingService(store, mail_sender, parser, config)

        result = service.forward(create_reference())

        assert result.failure_kind == FailureKind.PARSE
        mail_sender.send.assert_not_called()

    def test_connection_failure(self, mail_sender, config):
        store = Mock(spec=MailStore)
        store.open_folder.side_effect = MailStoreConnectionError("imap.example.com", 993, "timed out")
        service = MailForwardingService(store, mail_sender, EmailMessageParserImpl(), config)

        result = service.forward(create_reference())

        assert result.failure_kind == FailureKind.CONNECTION
        assert "imap.example.com:993" in result.error

    def test_unexpected_error_is_returned_not_raised(self, store, mail_sender, config):
        parser = Mock(spec=MailMessageParser)
        parser.parse.side_effect = RuntimeError("boom")
        service = MailForwardingService(store, mail_sender, parser, config)

        result = service.forward(create_reference())

        assert result.failure_kind == FailureKind.UNEXPECTED
        assert result.error == "boom"
        assert store.opened[0].closed
