"""
PasteShare — Diff Engine
========================

What:  Line-level differential between the contents of two pastes.
How:   Contents are split on "\\n" and compared with a longest common
       subsequence table. Walking the table from the top emits common
       lines as ' '; between two common lines, the left-only lines ('-')
       come before the right-only lines ('+').

    lcs[i][j] = length of the LCS of left[i:] and right[j:]

Both pastes must already have been fetched; missing pastes are rejected by
the caller before this stage.
"""

from typing import List, Sequence

from pasteshare.schemas.paste import DiffLine

LEFT_ONLY = "-"
RIGHT_ONLY = "+"
COMMON = " "


def lcs_table(left: Sequence[str], right: Sequence[str]) -> List[List[int]]:
    """Suffix LCS lengths, (len(left) + 1) x (len(right) + 1)."""
    rows, cols = len(left), len(right)
    table = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(cols - 1, -1, -1):
            if left[i] == right[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    return table


def diff_lines(left: Sequence[str], right: Sequence[str]) -> List[DiffLine]:
    table = lcs_table(left, right)
    lines: List[DiffLine] = []
    removed: List[str] = []
    added: List[str] = []

    def flush() -> None:
        lines.extend(DiffLine(marker=LEFT_ONLY, line=line) for line in removed)
        lines.extend(DiffLine(marker=RIGHT_ONLY, line=line) for line in added)
        removed.clear()
        added.clear()

    i = j = 0
    while i < len(left) or j < len(right):
        if i < len(left) and j < len(right) and left[i] == right[j]:
            flush()
            lines.append(DiffLine(marker=COMMON, line=left[i]))
            i += 1
            j += 1
        elif j < len(right) and (i == len(left) or table[i][j + 1] >= table[i + 1][j]):
            added.append(right[j])
            j += 1
        else:
            removed.append(left[i])
            i += 1
    flush()
    return lines


class DiffEngine:

    def diff(self, left, right) -> List[DiffLine]:
        """Diff two pastes (anything with a `content` string)."""
        return diff_lines(left.content.split("\n"), right.content.split("\n"))
