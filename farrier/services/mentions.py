"""
Mention tokens in free text

Notes and service descriptions reference people and horses with
``@[Display Name](entity-id)``. Stored text keeps the tokens; everything
shown to people or sent to the accounting system uses the cleaned form.
"""

import html
import re
from dataclasses import dataclass

import bleach

MENTION_PATTERN = re.compile(r"@\[([^\]]+)\]\(([^)]+)\)")
STRONG_PATTERN = re.compile(r"<strong>(.*?)</strong>")

NOTIFICATION_ALLOWED_TAGS = ["strong"]


@dataclass(frozen=True)
class Mention:
    display_name: str
    entity_id: str


def extract_mentions(text: str) -> list[Mention]:
    """Mentions in order of first appearance, one per entity id"""
    seen = set()
    mentions = []
    for match in MENTION_PATTERN.finditer(text or ""):
        display_name, entity_id = match.group(1).strip(), match.group(2).strip()
        if entity_id in seen:
            continue
        seen.add(entity_id)
        mentions.append(Mention(display_name=display_name, entity_id=entity_id))
    return mentions


def strip_mentions(text: str) -> str:
    """Replace every token with ``@Display Name``"""
    return MENTION_PATTERN.sub(lambda m: f"@{m.group(1).strip()}", text or "")


def emphasize_names(clean_text: str, names) -> str:
    """
    Escape cleaned text and wrap each ``@Name`` of the given names in <strong>.

    The text is escaped first, so the only markup in the result is the
    emphasis added here.
    """
    message = html.escape(clean_text or "", quote=False)
    # Longest first so "Ann" does not clip "@Anna"
    for name in sorted(set(names), key=len, reverse=True):
        escaped = html.escape(name, quote=False)
        message = re.sub(
            rf"@{re.escape(escaped)}(?![\w<])",
            lambda _m, n=escaped: f"<strong>{n}</strong>",
            message,
        )
    return bleach.clean(message, tags=NOTIFICATION_ALLOWED_TAGS, attributes={}, strip=True)


def build_notification_message(text: str) -> str:
    """Cleaned text of a tokenised note with each mentioned name emphasised"""
    names = [mention.display_name for mention in extract_mentions(text)]
    return emphasize_names(strip_mentions(text), names)


def render_for_horse(message: str, horse_name: str) -> str:
    """
    Keep emphasis only on the horse whose page is being viewed. Any other
    emphasised name is shown as plain text.
    """
    current = (horse_name or "").strip().lower()

    def _unwrap(match):
        inner = match.group(1)
        if html.unescape(inner).strip().lower() == current:
            return match.group(0)
        return inner

    return STRONG_PATTERN.sub(_unwrap, message or "")
