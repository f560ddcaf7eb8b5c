LIKE_ESCAPE = "\\"


def like_pattern(term):
    """`%term%` for a substring match, with `%`, `_` and `\\` in term taken literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def contains(column, term):
    """Case-insensitive substring filter on column."""
    return column.ilike(like_pattern(term), escape=LIKE_ESCAPE)
