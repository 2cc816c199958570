UNSET = object()
"""Marker for values that should not override anything when merging configs."""


def recursive_merge(*dictionaries: dict | None) -> dict:
    """Merge dictionaries recursively. Later dictionaries take precedence, UNSET values are skipped."""
    result: dict = {}
    for dictionary in dictionaries:
        if dictionary is None:
            continue
        for key, value in dictionary.items():
            if value is UNSET:
                continue
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = recursive_merge(result[key], value)
            else:
                result[key] = value
    return result
