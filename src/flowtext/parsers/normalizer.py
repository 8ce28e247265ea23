"""
Text normalization applied before Mermaid statements are classified.
"""

import re

# tolerate the inline-label spellings and rewrite them to `ARROW|label|`:
#   - Thick:  A == text ==> B
#   - Dash:   A -- text --> B
#   - Dotted: A -. text .-> B
# The opening token must not be part of a longer arrow (`---`, `-->`, `===`).
INLINE_THICK_LABEL_RE = re.compile(r"(?<![-=.<])==(?![=>])\s*([^|>\n\[\]{}]+?)\s*==>")
INLINE_DASH_LABEL_RE = re.compile(r"(?<![-=.<])--(?![-.>])\s*([^|>\n\[\]{}]+?)\s*-->")
INLINE_DOTTED_LABEL_RE = re.compile(r"(?<![-=.<])-\.(?![-.>])\s*([^|>\n\[\]{}]+?)\s*\.->")

_HORIZONTAL_WS = " \t"


def fold_quoted_newlines(text: str) -> str:
    """
    Join quoted labels that wrap across physical lines.

    A newline inside a `"..."` span becomes the two-character escape `\\n`,
    and the indentation of the continuation line is dropped. Quotes on a
    `%%` comment line never open a label.
    """
    out = []
    in_quote = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if not in_quote and (i == 0 or text[i - 1] == "\n"):
            line_end = text.find("\n", i)
            if line_end == -1:
                line_end = n
            if text[i:line_end].lstrip(_HORIZONTAL_WS).startswith("%%"):
                out.append(text[i:line_end])
                i = line_end
                continue
        if ch == '"' and (i == 0 or text[i - 1] != "\\"):
            in_quote = not in_quote
            out.append(ch)
        elif ch == "\n" and in_quote:
            out.append("\\n")
            while i + 1 < n and text[i + 1] in _HORIZONTAL_WS:
                i += 1
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def canonicalize_edge_labels(text: str) -> str:
    """Rewrite inline arrow labels to the pipe-delimited form."""
    text = INLINE_THICK_LABEL_RE.sub(lambda m: f"==>|{m.group(1).strip()}|", text)
    text = INLINE_DASH_LABEL_RE.sub(lambda m: f"-->|{m.group(1).strip()}|", text)
    text = INLINE_DOTTED_LABEL_RE.sub(lambda m: f"-.->|{m.group(1).strip()}|", text)
    return text


def normalize_text(text: str) -> str:
    """Apply both rewrites, in order. Malformed input passes through unchanged."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return canonicalize_edge_labels(fold_quoted_newlines(text))
