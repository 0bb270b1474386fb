def coerce_positive_int(value, default):
    """
    Return value as a positive int, or default when it is missing,
    non-numeric or not positive.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number > 0 else default
