"""Light clean-up of markdown produced by the model for follow-up answers."""

import re

_HEADER_NO_SPACE = re.compile(r"^(#{1,6})(?=[^\s#])", re.MULTILINE)
_BULLET_NO_SPACE = re.compile(r"^([ \t]*)([-•])(?=[^\s\-•])", re.MULTILINE)
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


def normalize_answer_markdown(text: str) -> str:
    """Ensure headers and bullets render, and collapse runs of blank lines.

    Only ``#`` headers and ``-``/``•`` bullets at the start of a line are
    touched, so hyphenated words and ``*`` emphasis are left as written.

    Examples:
        >>> normalize_answer_markdown("##Summary\\n-Point one")
        '## Summary\\n- Point one'
    """

    text = _HEADER_NO_SPACE.sub(r"\1 ", text)
    text = _BULLET_NO_SPACE.sub(r"\1\2 ", text)
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()
