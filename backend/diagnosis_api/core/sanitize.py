"""Text Sanitizer — strips markup fragments from free-text clinical fields.

Invariants:
    - Output is stripped of surrounding whitespace
    - <script>...</script> blocks, "javascript:" and inline on...= handlers are removed
    - Clinical punctuation (quotes, slashes, "=" in scores) is preserved
"""

import re

_SCRIPT_BLOCK = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE,
)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"\bon[a-z]+\s*=", re.IGNORECASE)


def sanitize_text(value: str) -> str:
    value = _SCRIPT_BLOCK.sub("", value)
    value = _JS_PROTOCOL.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()
