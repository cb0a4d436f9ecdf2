"""Unified diffs between a document's source before and after migration."""
from __future__ import annotations

import difflib


def generate_diff(
    original: str,
    modified: str,
    document: str,
    context_lines: int = 3,
) -> str:
    """Generate a unified diff for one document.

    Parameters
    ----------
    original : str
        Source before migration.
    modified : str
        Source after migration.
    document : str
        Document identity, used in the ``---``/``+++`` headers.
    context_lines : int
        Number of context lines around each change.

    Returns
    -------
    str
        Unified diff, or an empty string when nothing changed.

    Examples
    --------
    >>> print(generate_diff("import PagedList\\n", "import PagedList.Core\\n", "views.py"))
    --- a/views.py
    +++ b/views.py
    @@ -1 +1 @@
    -import PagedList
    +import PagedList.Core
    """
    if original == modified:
        return ""

    before = original.splitlines(keepends=True)
    after = modified.splitlines(keepends=True)

    # difflib glues a missing final newline onto the next header line
    for lines in (before, after):
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"

    return "".join(
        difflib.unified_diff(
            before,
            after,
            fromfile=f"a/{document}",
            tofile=f"b/{document}",
            n=context_lines,
        )
    )


def combine_diffs(diffs: dict[str, str]) -> str:
    """Join per-document diffs, ordered by document identity.

    Empty diffs are dropped.
    """
    ordered = sorted((doc, d) for doc, d in diffs.items() if d)
    return "\n".join(d for _, d in ordered)
