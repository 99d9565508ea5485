def parse_tags(raw: str):
    """Split a comma separated tag string, dropping blanks and duplicates but keeping order."""
    tags = []

    for tag in (raw or "").split(","):
        tag = tag.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)

    return tags
