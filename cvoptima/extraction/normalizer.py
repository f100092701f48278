import re

_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\n]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def normalize_text(text: str, *, drop_blank_lines: bool = False) -> str:
    """Canonicalize extracted text.

    Runs of horizontal whitespace (tabs included) become a single space, each
    line is trimmed, three or more consecutive newlines become two, and the
    result is trimmed. With drop_blank_lines every empty line is removed as
    well (the DOCX path). Normalizing normalized text returns it unchanged.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    lines = [line.strip() for line in text.split("\n")]
    if drop_blank_lines:
        lines = [line for line in lines if line]
    text = "\n".join(lines)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()
