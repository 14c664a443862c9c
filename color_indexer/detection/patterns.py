"""Token patterns scanned by the detector, in pass order."""

import re

HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})\b")

# Single line, non-greedy body
FUNCTION_COLOR = re.compile(r"\b(?:rgb|rgba|hsl|hsla)\(([^{\r\n]*?)\)", re.IGNORECASE)

# Not preceded by a word character, "#" or "(" so that function arguments
# and hex runs are left alone
COMPACT_HSL = re.compile(
    r"(?<![\w#(])([0-9]+(?:\.[0-9]+)?\s+[0-9]+(?:\.[0-9]+)?%\s+[0-9]+(?:\.[0-9]+)?%"
    r"(?:\s*/\s*(?:0?\.\d+|1(?:\.0+)?))?)"
)

CSS_VAR = re.compile(r"var\(\s*(--[\w-]+)\s*\)")

CSS_VAR_IN_FUNCTION = re.compile(
    r"\b(hsl|hsla|rgb|rgba)\(\s*var\(\s*(--[\w-]+)\s*\)\s*\)", re.IGNORECASE
)

TAILWIND_PREFIXES = (
    "bg",
    "text",
    "border",
    "ring",
    "shadow",
    "from",
    "via",
    "to",
    "outline",
    "decoration",
    "divide",
    "accent",
    "caret",
)
TAILWIND_CLASS = re.compile(
    r"\b(" + "|".join(TAILWIND_PREFIXES) + r")-(\w+(?:-\w+)?)\b"
)

CLASS_ATTRIBUTE = re.compile(r"""class\s*=\s*["']([^"']+)["']""")
CLASS_TOKEN = re.compile(r"\S+")
