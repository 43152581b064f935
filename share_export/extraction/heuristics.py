"""Pure text heuristics shared by every extraction strategy.

Nothing here touches markup or the network, so each function can be
tested on plain strings.
"""

from __future__ import annotations

import re

from share_export.models import Artifact, ArtifactType, Formatting, Role

SHORT_USER_TEXT_LIMIT = 50
"""Marker-free text shorter than this (and code-free) is taken as a user turn."""

MAX_MESSAGE_LENGTH = 100_000
"""Anything longer is page chrome or an application bundle, not a message."""

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_BLANK_LINE_RUN = re.compile(r"\n{3,}")

_CLASS_LANGUAGE = re.compile(r"(?:^|\s)(?:language|lang)-([\w#+-]+)")

_LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "sh": "bash",
    "shell": "bash",
    "c++": "cpp",
    "cs": "csharp",
    "rb": "ruby",
    "yml": "yaml",
}

# Ordered: first match wins.
_CONTENT_LANGUAGE_HINTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^\s*import\s[^\n]*\bfrom\s+['\"]", re.MULTILINE), "javascript"),
    (re.compile(r"^\s*def\s+\w+\s*\([^)]*\)[^:\n]*:", re.MULTILINE), "python"),
    (re.compile(r"^\s*from\s+[\w.]+\s+import\s", re.MULTILINE), "python"),
    (re.compile(r"\bfunction\b[^{]*\{"), "javascript"),
    (re.compile(r"<\?php"), "php"),
    (re.compile(r"^\s*#include\s*[<\"]", re.MULTILINE), "cpp"),
    (re.compile(r"\bSELECT\b.+?\bFROM\b", re.IGNORECASE | re.DOTALL), "sql"),
    (re.compile(r"\bclass\s+\w+[^{\n]*\{"), "java"),
)

# Anchored at the start of the message text
_SCRIPT_DUMP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"window\.__\w+\s*="),
    re.compile(r"self\.__next_f"),
    re.compile(r"(?:window\.)?__NEXT_DATA__"),
    re.compile(r"(?:var|let|const)\s+\w+\s*=\s*\{\s*\"\w+\"\s*:"),
    re.compile(r"\{\s*\"props\"\s*:"),
)

_CHROME_PHRASES = frozenset(
    {
        "skip to content",
        "log in",
        "sign up",
        "new chat",
        "share",
        "copy",
        "copy code",
        "report conversation",
        "terms of use",
        "privacy policy",
        "get started",
    }
)

_FENCED_CODE = re.compile(r"```([\w#+-]*)[^\n]*\n(.*?)```", re.DOTALL)
_MARKDOWN_LINK = re.compile(r"\[[^\]]+\]\((https?://[^)\s]+)\)")
_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*\]\((https?://[^)\s]+)\)")
_MARKDOWN_SYNTAX = re.compile(r"(^#{1,6}\s|^\s*[-*]\s|\*\*[^*]+\*\*|`[^`]+`)", re.M)


def clean_text(text: str) -> str:
    """Collapse whitespace runs to one space and blank-line runs to one blank line."""
    lines = [_HORIZONTAL_WS.sub(" ", line).strip() for line in text.split("\n")]
    joined = "\n".join(lines)
    return _BLANK_LINE_RUN.sub("\n\n", joined).strip()


def infer_role(text: str, *, has_code: bool = False) -> Role:
    """Fallback role for a container without an explicit author marker.

    Short, code-free text reads as a user prompt; anything longer or
    carrying code reads as an assistant answer.  This misclassifies short
    assistant replies and long user prompts.
    """
    if len(text) < SHORT_USER_TEXT_LIMIT and not has_code:
        return Role.USER
    return Role.ASSISTANT


def normalize_language(name: str) -> str:
    lowered = name.strip().lower()
    return _LANGUAGE_ALIASES.get(lowered, lowered)


def language_from_class(css_class: str | list[str] | None) -> str | None:
    if not css_class:
        return None
    if isinstance(css_class, list):
        css_class = " ".join(css_class)
    match = _CLASS_LANGUAGE.search(css_class)
    return normalize_language(match.group(1)) if match else None


def infer_language(code: str, css_class: str | list[str] | None = None) -> str | None:
    """Return a language name from a class hint, else from content, else ``None``."""
    hinted = language_from_class(css_class)
    if hinted:
        return hinted
    for pattern, language in _CONTENT_LANGUAGE_HINTS:
        if pattern.search(code):
            return language
    return None


def is_noise(text: str, *, has_code: bool = False) -> bool:
    """True for captured script dumps, navigation chrome or oversized text.

    Text from a container with code blocks is never taken for a script
    dump; the code is part of the answer.
    """
    if len(text) > MAX_MESSAGE_LENGTH:
        return True
    stripped = text.strip()
    if stripped.lower() in _CHROME_PHRASES:
        return True
    if has_code:
        return False
    return any(p.match(stripped) for p in _SCRIPT_DUMP_PATTERNS)


def strip_platform_affixes(title: str, platform_name: str) -> str:
    """Remove ``"ChatGPT - "`` style prefixes and ``" | Claude"`` suffixes."""
    name = re.escape(platform_name)
    title = re.sub(rf"^\s*{name}\s*[-|–—:]\s*", "", title, flags=re.IGNORECASE)
    title = re.sub(rf"\s*[-|–—:]\s*{name}\s*$", "", title, flags=re.IGNORECASE)
    return title.strip()


# ── Markdown sources (structured endpoints, LLM output) ────────────


def fenced_code_artifacts(markdown: str) -> list[Artifact]:
    artifacts: list[Artifact] = []
    for fence_language, body in _FENCED_CODE.findall(markdown):
        code = body.strip("\n")
        language = (
            normalize_language(fence_language)
            if fence_language
            else infer_language(code)
        )
        artifact = Artifact(type=ArtifactType.CODE, content=code, language=language)
        if artifact.is_useful:
            artifacts.append(artifact)
    for url in _MARKDOWN_IMAGE.findall(markdown):
        artifacts.append(Artifact(type=ArtifactType.IMAGE, content=url))
    return artifacts


def markdown_formatting(markdown: str) -> Formatting:
    return Formatting(
        is_markdown=bool(_MARKDOWN_SYNTAX.search(markdown) or "```" in markdown),
        has_code_blocks="```" in markdown,
        has_links=bool(_MARKDOWN_LINK.search(markdown)),
        has_images=bool(_MARKDOWN_IMAGE.search(markdown)),
    )
