import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Union

log = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
# a '#' preceded by a backslash is not a comment; the value gets a plain '#'
_COMMENT = re.compile(r"(?<!\\)#")
_BOM = "\ufeff"


class DirectiveKind(Enum):
    USER_AGENT = "user-agent"
    ALLOW = "allow"
    DISALLOW = "disallow"
    SITEMAP = "sitemap"
    CRAWL_DELAY = "crawl-delay"
    UNKNOWN = "unknown"

    @classmethod
    def from_field(cls, field: str) -> "DirectiveKind":
        try:
            return cls(field.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    value: str
    line: int
    field: str = ""


def decode(raw: Union[bytes, bytearray, str]) -> str:
    """
    Turn raw robots.txt content into text.
    Bytes are read as UTF-8; broken sequences become U+FFFD instead of failing.
    """
    if isinstance(raw, (bytes, bytearray)):
        text = bytes(raw).decode("utf-8", errors="replace")
    elif isinstance(raw, str):
        text = raw
    else:
        raise TypeError(f"robots.txt content must be bytes or str, not {type(raw).__name__}")
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text


def tokenize(raw: Union[bytes, bytearray, str]) -> List[Directive]:
    """
    Split robots.txt content into directives, in file order.

    Comments and blank lines are skipped. Lines without a colon and unrecognised
    field names come back as UNKNOWN so callers can see what was ignored.
    """
    directives: List[Directive] = []
    for lineno, raw_line in enumerate(_LINE_SPLIT.split(decode(raw)), 1):
        line = _COMMENT.split(raw_line, 1)[0].strip()
        if not line:
            continue
        field, sep, value = line.partition(":")
        if not sep:
            log.debug("line %d has no ':'; ignoring %r", lineno, line)
            directives.append(Directive(DirectiveKind.UNKNOWN, line, lineno))
            continue
        kind = DirectiveKind.from_field(field)
        if kind is DirectiveKind.UNKNOWN:
            log.debug("line %d: unknown field %r", lineno, field.strip())
        value = value.strip().replace("\\#", "#")
        directives.append(Directive(kind, value, lineno, field.strip()))
    return directives
