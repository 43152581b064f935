from share_export.rules.feed import (
    FileRuleFeed,
    HttpRuleFeed,
    RuleFeed,
    StaticRuleFeed,
    parse_rule_payload,
)
from share_export.rules.models import ParsingRule, SelectorSet
from share_export.rules.registry import MIN_ACCEPTED_CONFIDENCE, RuleRegistry

__all__ = [
    "MIN_ACCEPTED_CONFIDENCE",
    "FileRuleFeed",
    "HttpRuleFeed",
    "ParsingRule",
    "RuleFeed",
    "RuleRegistry",
    "SelectorSet",
    "StaticRuleFeed",
    "parse_rule_payload",
]
