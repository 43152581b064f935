from __future__ import annotations

import pytest

from share_export.extraction.heuristics import (
    MAX_MESSAGE_LENGTH,
    SHORT_USER_TEXT_LIMIT,
    clean_text,
    fenced_code_artifacts,
    infer_language,
    infer_role,
    is_noise,
    markdown_formatting,
    normalize_language,
    strip_platform_affixes,
)
from share_export.models import ArtifactType, Role

# ── Whitespace ───────────────────────────────────────────────────────


def test_clean_text_collapses_whitespace() -> None:
    assert clean_text("  a \t  b \n\n\n\n  c  ") == "a b\n\nc"


def test_clean_text_keeps_single_blank_line() -> None:
    assert clean_text("first\n\nsecond") == "first\n\nsecond"


# ── Roles ────────────────────────────────────────────────────────────


def test_short_text_reads_as_user() -> None:
    assert infer_role("x" * (SHORT_USER_TEXT_LIMIT - 1)) == Role.USER


def test_long_text_reads_as_assistant() -> None:
    assert infer_role("x" * SHORT_USER_TEXT_LIMIT) == Role.ASSISTANT


def test_code_reads_as_assistant() -> None:
    assert infer_role("ok", has_code=True) == Role.ASSISTANT


# ── Languages ────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("code", "language"),
    [
        ("import React, { useState } from 'react';", "javascript"),
        ("function add(a, b) {\n  return a + b;\n}", "javascript"),
        ("def add(a, b):\n    return a + b", "python"),
        ("from pathlib import Path", "python"),
        ("<?php echo 'hi'; ?>", "php"),
        ("#include <stdio.h>\nint main() {}", "cpp"),
        ("SELECT id, name\nFROM users", "sql"),
        ("public class Greeter {\n}", "java"),
        ("just some prose", None),
    ],
)
def test_infer_language_from_content(code: str, language: str | None) -> None:
    assert infer_language(code) == language


@pytest.mark.parametrize(
    ("css_class", "language"),
    [
        ("language-ts", "typescript"),
        (["hljs", "lang-rb"], "ruby"),
        ("language-python", "python"),
        ("hljs", None),
    ],
)
def test_infer_language_from_class(css_class, language: str | None) -> None:
    assert infer_language("", css_class) == language


def test_class_hint_wins_over_content() -> None:
    assert infer_language("def f():\n    pass", "language-cython") == "cython"


def test_normalize_language_aliases() -> None:
    assert normalize_language(" JS ") == "javascript"
    assert normalize_language("C++") == "cpp"
    assert normalize_language("haskell") == "haskell"


# ── Noise ────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text",
    [
        "Copy code",
        "  Skip to content ",
        "window.__INITIAL_STATE__ = {}",
        'self.__next_f.push([1,"abc"])',
        '{"props": {"pageProps": {}}}',
        'var config = {"apiKey": "x"}',
        "x" * (MAX_MESSAGE_LENGTH + 1),
    ],
)
def test_noise_detected(text: str) -> None:
    assert is_noise(text)


def test_real_text_is_not_noise() -> None:
    assert not is_noise("Can you share a copy of the recipe?")


def test_quoted_script_is_not_noise() -> None:
    answer = 'Next.js stores page data in __NEXT_DATA__, e.g. const data = {"page": "/"}.'
    assert not is_noise(answer)


def test_code_container_is_not_a_script_dump() -> None:
    code = 'const settings = {"theme": "dark", "fontSize": 14};'
    assert is_noise(code)
    assert not is_noise(code, has_code=True)
    assert is_noise("Copy code", has_code=True)


# ── Titles ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("raw", "name", "expected"),
    [
        ("ChatGPT - React Hooks", "ChatGPT", "React Hooks"),
        ("Debugging a flaky test | Claude", "Claude", "Debugging a flaky test"),
        ("Best trails - Perplexity", "Perplexity", "Best trails"),
        ("chatgpt: lowercase prefix", "ChatGPT", "lowercase prefix"),
        ("Plain title", "Gemini", "Plain title"),
        ("ChatGPT", "ChatGPT", "ChatGPT"),
    ],
)
def test_strip_platform_affixes(raw: str, name: str, expected: str) -> None:
    assert strip_platform_affixes(raw, name) == expected


# ── Markdown sources ─────────────────────────────────────────────────


def test_fenced_code_with_language_tag() -> None:
    text = "Intro\n\n```py\nprint('hello world')\n```\n"
    (artifact,) = fenced_code_artifacts(text)
    assert artifact.type == ArtifactType.CODE
    assert artifact.language == "python"
    assert artifact.content == "print('hello world')"


def test_fenced_code_language_inferred() -> None:
    text = "```\nSELECT name FROM pets WHERE kind = 'cat'\n```"
    (artifact,) = fenced_code_artifacts(text)
    assert artifact.language == "sql"


def test_trivial_fences_dropped() -> None:
    assert fenced_code_artifacts("```\nx = 1\n```") == []


def test_markdown_images_become_artifacts() -> None:
    artifacts = fenced_code_artifacts("![chart](https://example.org/chart.png)")
    assert [a.type for a in artifacts] == [ArtifactType.IMAGE]


def test_markdown_formatting_flags() -> None:
    formatting = markdown_formatting(
        "**Bold** and a [link](https://example.org)\n\n```\ncode here\n```"
    )
    assert formatting.is_markdown
    assert formatting.has_code_blocks
    assert formatting.has_links
    assert not formatting.has_images


def test_plain_text_is_not_markdown() -> None:
    formatting = markdown_formatting("Just a sentence.")
    assert not formatting.is_markdown
    assert not formatting.has_code_blocks
