"""Task lookup and enumeration over the section tree."""

from __future__ import annotations

from mx.schemas import Section


def list_task_sections(root: Section, heading_level: int) -> list[Section]:
    """Return every section at exactly heading_level, in document order."""
    return [
        section
        for section in root.walk()
        if section is not root and section.level == heading_level
    ]


def list_tasks(root: Section, heading_level: int) -> list[str]:
    """Return task titles at heading_level; duplicates are preserved."""
    return [section.title for section in list_task_sections(root, heading_level)]


def find_task(root: Section, name: str, heading_level: int) -> Section | None:
    """Find the first section at heading_level whose title equals name.

    Comparison is exact and case-sensitive after trimming whitespace. Sections
    at other levels never match, and the document root is never a candidate.
    """
    wanted = name.strip()
    for section in list_task_sections(root, heading_level):
        if section.title.strip() == wanted:
            return section
    return None
