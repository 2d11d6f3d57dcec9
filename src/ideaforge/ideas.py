"""Split streamed Markdown into per-idea cards."""

from __future__ import annotations

import re
from dataclasses import dataclass

# "# Title", "## 1. Title", "### Project 2: Title"
_HEADING = re.compile(r"^\s{0,3}(?P<level>#{1,3})\s+(?P<title>\S.*?)\s*#*\s*$")
# "1. **Title**" / "**Project 3: Title**"
_BOLD_TITLE = re.compile(r"^\s{0,3}(?:\d+[.)]\s+)?\*\*(?P<title>[^*]+)\*\*\s*:?\s*$")
_NUMBERING = re.compile(r"^(?:project\s+)?\d+\s*[.):\-]\s*", re.I)


@dataclass
class Idea:
    """One idea card: heading text plus the Markdown under it."""

    title: str
    body: str

    @property
    def markdown(self) -> str:
        return f"## {self.title}\n\n{self.body}".rstrip() + "\n"


def _clean_title(title: str) -> str:
    title = title.strip().strip("*").strip()
    return _NUMBERING.sub("", title) or title


def _heading_titles(lines: list[str]) -> list[str | None]:
    matches = [_HEADING.match(ln) for ln in lines]
    levels = [len(m.group("level")) for m in matches if m]
    if not levels:
        return [None] * len(lines)
    # Split only on the outermost heading level present; a lone document
    # title above deeper headings does not count
    top = min(levels)
    deeper = [lv for lv in levels if lv > top]
    if levels.count(top) == 1 and deeper:
        top = min(deeper)
    return [
        _clean_title(m.group("title")) if m and len(m.group("level")) == top else None
        for m in matches
    ]


def _bold_titles(lines: list[str]) -> list[str | None]:
    titles: list[str | None] = []
    for ln in lines:
        m = _BOLD_TITLE.match(ln)
        titles.append(_clean_title(m.group("title")) if m else None)
    return titles


def split_ideas(markdown: str) -> list[Idea]:
    """Return the idea cards in *markdown*.

    Headings split the text when present; otherwise standalone bold titles
    do.  Text before the first title (a model's preamble) is dropped.
    """
    lines = markdown.splitlines()
    titles = _heading_titles(lines)
    if not any(titles):
        titles = _bold_titles(lines)

    ideas: list[Idea] = []
    title: str | None = None
    body: list[str] = []
    for line, heading in zip(lines, titles):
        if heading is not None:
            if title is not None:
                ideas.append(Idea(title=title, body="\n".join(body).strip()))
            title, body = heading, []
        elif title is not None:
            body.append(line)
    if title is not None:
        ideas.append(Idea(title=title, body="\n".join(body).strip()))
    return ideas
