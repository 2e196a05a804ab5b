"""IMAP 文件夹名的 modified UTF-7 编码（RFC 3501 §5.1.3）"""

import base64
from typing import List


def _encode_run(chars: List[str]) -> str:
    raw = "".join(chars).encode("utf-16-be")
    encoded = base64.b64encode(raw).decode("ascii").rstrip("=").replace("/", ",")
    return f"&{encoded}-"


def encode_mailbox_name(name: str) -> str:
    """
    编码文件夹名

    可打印 ASCII 原样保留（& 写作 &-），其余字符按 UTF-16BE
    做 base64，并用 "," 代替 "/"。

    >>> encode_mailbox_name("архив")
    '&BDAEQARFBDgEMg-'
    """
    result: List[str] = []
    pending: List[str] = []

    for char in name:
        if 0x20 <= ord(char) <= 0x7E:
            if pending:
                result.append(_encode_run(pending))
                pending = []
            result.append("&-" if char == "&" else char)
        else:
            pending.append(char)

    if pending:
        result.append(_encode_run(pending))

    return "".join(result)
