LIKE_ESCAPE = "\\"


def like_pattern(text: str) -> str:
    """Substring pattern for ILIKE with % and _ matched literally."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
