# Copyright (C) 2022 The Etsuko Contributors
#
# This file is part of Etsuko.
#
# Etsuko is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Etsuko is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Etsuko.  If not, see <http://www.gnu.org/licenses/>.
"""Bigram string similarity, used to match search queries against emails.
"""
from collections import Counter

SEARCH_THRESHOLD = 0.4
"""The lowest score accepted as a search match."""


def _strip_whitespace(s: str) -> str:
    return "".join(s.split())


def similarity(a: str, b: str) -> float:
    """Score how similar `a` and `b` are, from 0 to 1.

    Whitespace is removed from both strings first. Every adjacent-character bigram of `b`
    which still has an unmatched copy in `a` counts as one intersection.
    The score is `2 * intersections / (len(a) + len(b) - 2)`.

    Raise `ValueError` when the stripped lengths sum up to 2 or less, the score is undefined there.
    Use `is_similar` if you just want a match test.
    """
    a = _strip_whitespace(a)
    b = _strip_whitespace(b)
    denominator = len(a) + len(b) - 2
    if denominator <= 0:
        raise ValueError("similarity is undefined for {!r} and {!r}".format(a, b))
    remaining = Counter(a[i : i + 2] for i in range(len(a) - 1))
    intersections = 0
    for i in range(len(b) - 1):
        bigram = b[i : i + 2]
        if remaining[bigram] > 0:
            remaining[bigram] -= 1
            intersections += 1
    return min(1.0, 2.0 * intersections / denominator)


def is_similar(query: str, text: str, threshold: float = SEARCH_THRESHOLD) -> bool:
    """Check if `similarity(query, text)` reaches `threshold`. Undefined scores never match."""
    try:
        return similarity(query, text) >= threshold
    except ValueError:
        return False
