from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from upforgrabs_core.models import Project

_TAG_RE = re.compile(r"[a-z0-9+#.\-]+")

INVALID_TAG_MESSAGE = "Tag '{tag}' contains invalid characters. Allowed characters: a-z, 0-9, +, #, . or -"


def validate_tags(project: Project) -> list[str]:
    """Return problems with the project's tags; empty when they are fine."""
    tags = project.tags
    if not tags or not isinstance(tags, list):
        return ["No tags defined for file"]

    errors = []

    counts = Counter(str(t) for t in tags)
    duplicates = [tag for tag, count in counts.items() if count > 1]
    if duplicates:
        errors.append(f"Duplicate tags found: {', '.join(duplicates)}")

    for tag in counts:
        if not _TAG_RE.fullmatch(tag):
            errors.append(INVALID_TAG_MESSAGE.format(tag=tag))

    return errors
