"""
Edit distance helpers used by similarity detection.
"""


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic Levenshtein distance (insert/delete/substitute, unit cost)."""
    if not s1:
        return len(s2) if s2 else 0
    if not s2:
        return len(s1)

    rows = len(s1) + 1
    cols = len(s2) + 1
    distances = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        distances[i][0] = i
    for j in range(cols):
        distances[0][j] = j

    for i in range(1, rows):
        c1 = s1[i - 1]
        for j in range(1, cols):
            cost = 0 if c1 == s2[j - 1] else 1
            distances[i][j] = min(
                distances[i - 1][j] + 1,
                distances[i][j - 1] + 1,
                distances[i - 1][j - 1] + cost,
            )

    return distances[rows - 1][cols - 1]


def levenshtein_similarity(s1: str, s2: str) -> float:
    """
    Normalized similarity in [0, 1].

    1 - distance / max(len), and 1.0 when both strings are empty.
    """
    max_length = max(len(s1), len(s2))
    if max_length == 0:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / max_length
