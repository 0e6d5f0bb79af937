"""Deep merge logic for layered configuration."""


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries. Override wins on conflicts.

    None values in ``override`` mean "not set" and leave ``base`` alone,
    so unset environment overrides can be merged unconditionally.

    Args:
        base: Base configuration
        override: Configuration to merge on top

    Returns:
        New merged dictionary

    Example:
        base = {"cache": {"ttl_seconds": 3600}, "providers": ["env"]}
        override = {"cache": {"ttl_seconds": 60}, "providers": None}
        result = {"cache": {"ttl_seconds": 60}, "providers": ["env"]}
    """
    result = dict(base)

    for key, value in override.items():
        if value is None:
            continue
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result
