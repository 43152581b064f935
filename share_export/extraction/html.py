"""Rule-driven conversation parsing over static or rendered markup.

Shared by the static-markup, rendered-DOM and community-rule strategies:
they differ only in where the HTML comes from and which rules they try.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from bs4 import BeautifulSoup, Tag

from share_export.core.exceptions import ExtractionFailedException
from share_export.extraction.heuristics import (
    clean_text,
    infer_language,
    infer_role,
    is_noise,
    strip_platform_affixes,
)
from share_export.models import (
    Artifact,
    ArtifactType,
    Conversation,
    Formatting,
    Message,
    MessageContent,
    Role,
    utc_now,
)
from share_export.providers.types import PlatformConfig
from share_export.rules.models import ParsingRule, SelectorSet

logger = logging.getLogger(__name__)

_BLOCK_TAGS = [
    "p", "div", "li", "pre", "blockquote", "tr", "table", "ul", "ol",
    "h1", "h2", "h3", "h4", "h5", "h6",
]  # fmt: skip
_MARKDOWN_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "strong", "em", "pre", "blockquote"]  # fmt: skip

_ROLE_ATTRIBUTES = ("data-message-author-role", "data-role")
_ROLE_VALUES: dict[str, Role] = {
    "user": Role.USER,
    "human": Role.USER,
    "assistant": Role.ASSISTANT,
    "model": Role.ASSISTANT,
    "ai": Role.ASSISTANT,
    "system": Role.SYSTEM,
}


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ── Rule matching ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Matched:
    rule: ParsingRule
    containers: list[Tag]


@dataclass(frozen=True)
class NoMatch:
    rule: ParsingRule


RuleMatch = Matched | NoMatch


def _outermost(tags: list[Tag]) -> list[Tag]:
    """Drop any tag nested inside another tag of the same selection."""
    selected = {id(tag) for tag in tags}
    return [
        tag for tag in tags if not any(id(parent) in selected for parent in tag.parents)
    ]


def match_rule(soup: BeautifulSoup, rule: ParsingRule) -> RuleMatch:
    containers = _outermost(soup.select(rule.selectors.messages))
    if not containers:
        return NoMatch(rule)
    return Matched(rule, containers)


# ── Per-container extraction ───────────────────────────────────────


def _matches(tag: Tag, selector: str | None) -> bool:
    if not selector:
        return False
    return bool(tag.css.match(selector) or tag.select_one(selector) is not None)


def _attribute_role(tag: Tag) -> Role | None:
    for attr in _ROLE_ATTRIBUTES:
        holder = tag if tag.has_attr(attr) else tag.find(attrs={attr: True})
        if isinstance(holder, Tag):
            value = str(holder.get(attr, "")).strip().lower()
            if value in _ROLE_VALUES:
                return _ROLE_VALUES[value]
    return None


def explicit_role(tag: Tag, selectors: SelectorSet) -> Role | None:
    """Role from markup alone, or ``None`` when the container carries no marker."""
    if _matches(tag, selectors.user_role):
        return Role.USER
    if _matches(tag, selectors.assistant_role):
        return Role.ASSISTANT
    return _attribute_role(tag)


def block_text(node: Tag) -> str:
    """Visible text with block boundaries kept as line breaks."""
    clone = copy.copy(node)
    for br in clone.find_all("br"):
        br.replace_with("\n")
    for block in clone.find_all(_BLOCK_TAGS):
        block.insert_after("\n")
    return clean_text(clone.get_text())


def _code_language(node: Tag, code: str) -> str | None:
    candidates = [node]
    inner = node.find("code")
    if isinstance(inner, Tag):
        candidates.append(inner)
    if isinstance(node.parent, Tag) and node.parent.name == "pre":
        candidates.append(node.parent)

    for candidate in candidates:
        language = infer_language("", candidate.get("class"))
        if language:
            return language
    return infer_language(code)


def code_artifacts(node: Tag, selector: str) -> list[Artifact]:
    artifacts: list[Artifact] = []
    seen: set[str] = set()
    for block in _outermost(node.select(selector)):
        code = block.get_text().strip("\n")
        if code in seen:
            continue
        seen.add(code)
        artifact = Artifact(
            type=ArtifactType.CODE,
            content=code,
            language=_code_language(block, code),
        )
        if artifact.is_useful:
            artifacts.append(artifact)
    return artifacts


def media_artifacts(node: Tag) -> list[Artifact]:
    artifacts: list[Artifact] = []
    seen: set[str] = set()
    for img in node.select("img[src]"):
        src = str(img["src"]).strip()
        if src and src not in seen:
            seen.add(src)
            artifacts.append(Artifact(type=ArtifactType.IMAGE, content=src))
    for link in node.select("a[href]"):
        href = str(link["href"]).strip()
        if href.startswith(("http://", "https://")) and href not in seen:
            seen.add(href)
            artifacts.append(Artifact(type=ArtifactType.LINK, content=href))
    return [a for a in artifacts if a.is_useful]


def _parse_timestamp(value: str) -> datetime | None:
    value = value.strip()
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def message_timestamp(node: Tag, selector: str | None) -> datetime | None:
    if not selector:
        return None
    holder = node.select_one(selector)
    if holder is None:
        return None
    raw = holder.get("datetime") or holder.get_text()
    return _parse_timestamp(str(raw))


# ── Parser ─────────────────────────────────────────────────────────


class HtmlConversationParser:
    """Applies one :class:`ParsingRule` to a parsed share page."""

    def __init__(self, config: PlatformConfig) -> None:
        self.config = config

    def parse(self, html: str, rule: ParsingRule, source_url: str) -> Conversation:
        return self.parse_soup(parse_document(html), rule, source_url)

    def parse_soup(
        self, soup: BeautifulSoup, rule: ParsingRule, source_url: str
    ) -> Conversation:
        match match_rule(soup, rule):
            case NoMatch(rule=unmatched):
                raise ExtractionFailedException(
                    f"rule {unmatched.id} matched no message containers"
                )
            case Matched(rule=matched, containers=containers):
                messages = self._messages(containers, matched.selectors)

        if not messages:
            raise ExtractionFailedException(
                f"rule {rule.id} produced no usable messages"
            )

        logger.debug(
            "Rule %s v%d: %d containers, %d messages",
            rule.id,
            rule.version,
            len(containers),
            len(messages),
        )
        return Conversation.create(
            platform=self.config.platform,
            title=self.title(soup, rule.selectors),
            messages=messages,
            source_url=source_url,
        )

    def _messages(self, containers: list[Tag], selectors: SelectorSet) -> list[Message]:
        extracted_at = utc_now()
        messages: list[Message] = []
        for container in containers:
            message = self._message(container, selectors, extracted_at)
            if message is not None:
                messages.append(message)
        return messages

    def _message(
        self, container: Tag, selectors: SelectorSet, extracted_at: datetime
    ) -> Message | None:
        node = container
        if selectors.content:
            content_node = container.select_one(selectors.content)
            if content_node is not None:
                node = content_node

        text = block_text(node)
        code = code_artifacts(container, selectors.code_block)
        if not text or is_noise(text, has_code=bool(code)):
            return None

        media = media_artifacts(node)
        role = explicit_role(container, selectors) or infer_role(
            text, has_code=bool(code)
        )

        return Message(
            role=role,
            content=MessageContent(
                text=text,
                artifacts=code + media,
                formatting=Formatting(
                    is_markdown=bool(code) or node.find(_MARKDOWN_TAGS) is not None,
                    has_code_blocks=bool(code),
                    has_links=any(a.type == ArtifactType.LINK for a in media),
                    has_images=any(a.type == ArtifactType.IMAGE for a in media),
                ),
            ),
            timestamp=message_timestamp(container, selectors.timestamp) or extracted_at,
        )

    def title(self, soup: BeautifulSoup, selectors: SelectorSet) -> str:
        """Best visible title, with platform affixes removed."""
        candidates = [clean_text(tag.get_text()) for tag in soup.select(selectors.title)]
        og = soup.select_one('meta[property="og:title"]')
        if og is not None and og.get("content"):
            candidates.append(clean_text(str(og["content"])))

        name = self.config.display_name
        for candidate in candidates:
            title = strip_platform_affixes(candidate, name)
            if title and title.lower() != name.lower():
                return title
        return self.config.default_title
