def normalize_pattern(value: str) -> str:
    """Rule patterns are root-relative: prefix '/' unless empty or already rooted."""
    if value and not value.startswith("/"):
        return "/" + value
    return value


def pattern_matches(pattern: str, path: str) -> bool:
    """
    Match a robots.txt path pattern against a request path.

      - ''         : matches nothing
      - '/a/b'     : plain prefix match
      - '/a/*.pdf' : '*' matches any run of characters (fragments found in order)
      - '/a$'      : trailing '$' pins the end of the path

    Every other character is literal, including a '$' that is not last.
    """
    if not pattern:
        return False

    anchored = pattern.endswith("$")
    if anchored:
        pattern = pattern[:-1]

    if "*" not in pattern:
        return path == pattern if anchored else path.startswith(pattern)

    head, *middle, tail = pattern.split("*")
    if not path.startswith(head):
        return False

    pos = len(head)
    for fragment in middle:
        found = path.find(fragment, pos)
        if found < 0:
            return False
        pos = found + len(fragment)

    if anchored:
        # tail must sit at the very end without overlapping earlier fragments
        return path.endswith(tail) and len(path) - len(tail) >= pos
    return path.find(tail, pos) >= 0
