"""Wikitext cleanup and section extraction for travel guide pages."""

from __future__ import annotations

import html
import re
from typing import Dict, Optional

MIN_SECTION_CHARS = 50
MIN_SENTENCE_CHARS = 10

_HEADING = re.compile(r"^==(?!=)\s*(.+?)\s*==\s*$", re.MULTILINE)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_TEMPLATE = re.compile(r"\{\{[^{}]*\}\}")
_FILE_LINK = re.compile(r"\[\[(?:File|Image):[^\[\]]*(?:\[\[[^\]]*\]\][^\[\]]*)*\]\]", re.IGNORECASE)
_LINK = re.compile(r"\[\[(?:[^\]|]*\|)?([^\]]+)\]\]")
_EXTERNAL_LINK = re.compile(r"\[https?://[^\s\]]+\s*([^\]]*)\]")
_EMPHASIS = re.compile(r"'{2,}")
_TAG = re.compile(r"<[^>]+>")
_SUBHEADING = re.compile(r"^=+.*?=+\s*$", re.MULTILINE)
_LIST_MARKER = re.compile(r"^[*#:;]+\s*", re.MULTILINE)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def clean_markup(text: str) -> str:
    """Strip wiki markup down to plain prose.

    Removes comments, templates (nested ones included), file embeds,
    link brackets (keeping the label), external link URLs, emphasis
    quotes, HTML tags and sub-headings, decodes entities and collapses
    whitespace.
    """
    text = _COMMENT.sub("", text)
    previous = None
    while previous != text:
        previous = text
        text = _TEMPLATE.sub("", text)
    text = _FILE_LINK.sub("", text)
    text = _LINK.sub(r"\1", text)
    text = _EXTERNAL_LINK.sub(r"\1", text)
    text = _EMPHASIS.sub("", text)
    text = _TAG.sub("", text)
    text = _SUBHEADING.sub("", text)
    text = _LIST_MARKER.sub("", text)
    text = html.unescape(text)
    return re.sub(r"\s+", " ", text).strip()


def parse_sections(wikitext: str) -> Dict[str, str]:
    """Split a page into cleaned level-2 sections.

    Args:
        wikitext: Raw page source.

    Returns:
        Mapping of lowercased heading to cleaned text; sections with
        fewer than MIN_SECTION_CHARS characters are dropped.
    """
    sections: Dict[str, str] = {}
    headings = list(_HEADING.finditer(wikitext))
    for index, heading in enumerate(headings):
        start = heading.end()
        end = headings[index + 1].start() if index + 1 < len(headings) else len(wikitext)
        body = clean_markup(wikitext[start:end])
        if len(body) > MIN_SECTION_CHARS:
            sections[clean_markup(heading.group(1)).lower()] = body
    return sections


def first_sentence(text: str) -> Optional[str]:
    """Return the first well-formed sentence.

    A sentence qualifies when it is at least MIN_SENTENCE_CHARS long,
    starts with a capital letter and ends with a period.
    """
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence = sentence.strip()
        if (
            len(sentence) >= MIN_SENTENCE_CHARS
            and sentence[0].isupper()
            and sentence.endswith(".")
        ):
            return sentence
    return None
