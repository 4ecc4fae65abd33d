"""Connection String Helpers — credential-free views of a MongoDB URI for logs.

Invariants:
    - Neither function ever returns the userinfo (user:password) portion
    - Multi-host seed lists are preserved ("h1:27017,h2:27017")
    - Unescaped '#', '?' or '/' inside a password cannot shift the host boundary

Design Decisions:
    - Cut at the last '@' before looking for '/' or '?': urlsplit() ends the netloc
      at the first '#', '?' or '/', which may sit inside the password
"""


def datastore_host(uri: str) -> str | None:
    """Host (and port) portion of the URI, without credentials."""
    _, sep, rest = uri.partition("://")
    if not sep:
        return None
    rest = rest.rpartition("@")[2]
    for delimiter in ("/", "?"):
        rest = rest.partition(delimiter)[0]
    return rest or None


def mask_uri(uri: str | None) -> str:
    """Scheme-only mask, e.g. 'mongodb+srv://*', for startup summaries."""
    if not uri:
        return "NOT SET"
    if uri.startswith("mongodb+srv://"):
        return "mongodb+srv://*"
    return "mongodb://*"
