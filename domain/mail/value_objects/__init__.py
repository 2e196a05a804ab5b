"""邮件值对象模块"""

from domain.mail.value_objects.email_content import EmailContent
from domain.mail.value_objects.parsed_email import ParsedEmail
from domain.mail.value_objects.message_reference import MessageReference
from domain.mail.value_objects.outgoing_mail import OutgoingMail
from domain.mail.value_objects.forward_result import ForwardResult, ForwardStatus, FailureKind
from domain.mail.value_objects.poll_cycle_report import PollCycleReport
from domain.mail.value_objects.forwarding_config import ForwardingConfig
from domain.mail.value_objects.polling_config import PollingConfig

__all__ = [
    "EmailContent",
    "ParsedEmail",
    "MessageReference",
    "OutgoingMail",
    "ForwardResult",
    "ForwardStatus",
    "FailureKind",
    "PollCycleReport",
    "ForwardingConfig",
    "PollingConfig",
]
