"""Split long lines for IRC (512 byte limit) at word boundaries."""

from __future__ import annotations


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", errors="replace"))


def split_irc_message(content: str, max_bytes: int = 450) -> list[str]:
    """Split content into chunks of at most max_bytes UTF-8 bytes.

    IRC lines are limited to 512 bytes including prefix, command, target and
    CRLF; 450 leaves room for "PRIVMSG #channel :". Chunks break at the last
    space when it falls in the second half of the chunk (the space is
    dropped), otherwise at the byte limit. Characters are never split.
    """
    if not content:
        return []
    if _byte_len(content) <= max_bytes:
        return [content]

    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for char in content:
        char_size = _byte_len(char)
        if current and size + char_size > max_bytes:
            chunk = "".join(current)
            cut = chunk.rfind(" ")
            if cut > 0 and _byte_len(chunk[:cut]) > max_bytes // 2:
                chunks.append(chunk[:cut])
                rest = chunk[cut + 1 :]
            else:
                chunks.append(chunk)
                rest = ""
            current = list(rest)
            size = _byte_len(rest)
        current.append(char)
        size += char_size
    if current:
        chunks.append("".join(current))
    return chunks
