"""
Fuzzy matching of a query against candidate texts and ranking of the matches.

A candidate matches if it contains every character of the query in the same
order (case does not matter). Matches are scored by how compact they are:
the fewer characters lie between the first and the last matched character,
the better. Among equally compact matches, the one starting earlier wins.
"""
# Quicklaunch package
from .entries import EMPTY_QUERY_LIMIT, Mode, UnknownModeError

# Score of a contiguous match at the start of the text
MAX_SCORE = (0, 0)

# Weight used for entries, which were never launched
NO_WEIGHT = -1

def find_best_span(query, text):
    """
    Return `(start, end)` of the most compact occurrence of `query` as a
    subsequence of `text`, with `end` being exclusive. When several spans
    are equally compact, the leftmost one is taken. Return `None` if the
    query doesn't occur. Both strings are expected to be lowercased.
    """
    best = None
    first = query[0]
    start = text.find(first)
    while start != -1:
        pos = start + 1
        for char in query[1:]:
            pos = text.find(char, pos)
            if pos == -1:
                # No later start can succeed either
                return best
            pos += 1
        if best is None or pos - start < best[1] - best[0]:
            best = (start, pos)
        start = text.find(first, start + 1)
    return best

def get_score(query, text):
    """
    Return a score for how well `text` matches `query`, or `None` if it
    doesn't match at all. The score is a tuple of the negated number of
    skipped characters and the negated start offset, so a higher score
    means a better match and compactness always counts before position.
    The empty query matches everything with the best possible score.
    """
    if not query:
        return MAX_SCORE
    span = find_best_span(query.lower(), text.lower())
    if span is None:
        return None
    start, end = span
    gaps = (end - start) - len(query)
    return (-gaps, -start)

def rank(query, items, get_text, get_key, get_weight=None):
    """
    Return the matching `items` ordered from best to worst.

    Items are compared by their fuzzy score first and by the value of
    `get_weight()` (if given) second. The sort is stable, so otherwise
    equal items keep the order in which they appear in `items`. Only the
    first item per `get_key()` is taken into account.
    """
    scored = []
    seen = set()
    for item in items:
        key = get_key(item)
        if key in seen:
            continue
        seen.add(key)
        score = get_score(query, get_text(item))
        if score is not None:
            weight = get_weight(item) if get_weight else 0
            scored.append((score, weight, item))
    scored.sort(key=lambda triple: (triple[0], triple[1]), reverse=True)
    return [item for _, _, item in scored]

def get_matches(query, desktop_entries, weights):
    """
    Rank `desktop_entries` by `query`. `weights` maps entry names to their
    persisted usage weights, which break ties between equally good matches.
    Entries without a weight rank below those that were launched before.
    """
    return rank(query, desktop_entries,
                get_text=lambda entry: entry.name,
                get_key=lambda entry: entry.name,
                get_weight=lambda entry: weights.get(entry.name, NO_WEIGHT))

def get_matches_custom_mode(catalog, mode_name, query, limit=EMPTY_QUERY_LIMIT):
    """
    Rank the candidates of the custom mode called `mode_name` by `query` and
    return at most `limit` of them. An unknown mode gives no matches.
    """
    try:
        lines = catalog.pool(Mode.custom(mode_name))
    except UnknownModeError:
        return []
    matches = rank(query, lines, get_text=lambda line: line,
                   get_key=lambda line: line)
    return matches[:limit]
