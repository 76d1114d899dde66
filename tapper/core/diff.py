from __future__ import annotations


def first_mismatch(typed: str, reference: str) -> int:
    """Index of the first differing character of ``typed`` and ``reference``.

    Only the common prefix is scanned; if it matches, its length is returned.
    A result equal to ``len(reference)`` means the reference is fully typed.
    """
    limit = min(len(typed), len(reference))
    for index in range(limit):
        if typed[index] != reference[index]:
            return index
    return limit
