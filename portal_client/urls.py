"""Request target composition."""

ABSOLUTE_PREFIXES = ("http://", "https://")


def build_url(base_url: str, path: str) -> str:
    """
    Join a configured base address and a caller path.

    Absolute ``http(s)://`` paths override the base. Otherwise at most one
    leading slash is stripped from the path and the base gets exactly one
    trailing slash.
    """
    if path.startswith(ABSOLUTE_PREFIXES):
        return path

    normalized_path = path[1:] if path.startswith("/") else path
    normalized_base = f"{base_url.rstrip('/')}/"
    return f"{normalized_base}{normalized_path}"
