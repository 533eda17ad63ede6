"""
Snippet normalization.

Turns provider preview snippets into plain text. Gmail snippets carry HTML
entities and occasional quoted-printable leftovers; Graph ``bodyPreview``
is already plain text. Normalization is idempotent: the cleanup steps are
repeated until the text stops changing, so a normalized snippet is a
fixed point.
"""

import html
import re

from threadhub.integrations.email.types import SnippetEncoding

# Invisible characters mail clients use as preheader padding.
_INVISIBLE_CHARS = re.compile(r"[\u034f\u200b\u200c\u200d\u2060\ufeff\u00ad]")
_QP_SOFT_BREAK = re.compile(r"=\r?\n")
_QP_RUN = re.compile(r"(?:=[0-9A-F]{2})+")
_WHITESPACE = re.compile(r"\s+")


def _decode_qp_run(match: re.Match[str]) -> str:
    run = match.group(0)
    raw = bytes(int(run[i + 1 : i + 3], 16) for i in range(0, len(run), 3))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return run


def _clean_gmail(text: str) -> str:
    text = _QP_SOFT_BREAK.sub("", text)
    text = _QP_RUN.sub(_decode_qp_run, text)
    text = html.unescape(text)
    text = _INVISIBLE_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def _clean_plain(text: str) -> str:
    text = _INVISIBLE_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


_CLEANERS = {
    SnippetEncoding.GMAIL: _clean_gmail,
    SnippetEncoding.PLAIN: _clean_plain,
}


def normalize_snippet(raw: str | None, encoding: SnippetEncoding | str) -> str:
    """Decode a provider snippet into a plain-text preview.

    Never raises. Unknown encodings return the raw value unchanged.
    """
    if not raw:
        return ""

    try:
        cleaner = _CLEANERS[SnippetEncoding(encoding)]
    except ValueError:
        return raw

    # A changing pass either shortens the text or turns other whitespace
    # into plain spaces, so this terminates.
    text = raw
    while True:
        cleaned = cleaner(text)
        if cleaned == text:
            return text
        text = cleaned
