from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from rich.text import Text

from .config import HN_ITEM_PAGE_URL
from .datamodels import Story

SEPARATOR = " │ "


def relative_age(posted: datetime, now: Optional[datetime] = None) -> str:
    """Compact age of a timestamp: ``"42m"``, ``"5h"`` or ``"3d"``."""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - posted).total_seconds()))
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def domain(url: Optional[str]) -> str:
    if not url:
        return ""
    host = urlparse(url).netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def story_line(story: Story, rank: int) -> Text:
    text = Text()
    text.append(f"{rank:2}. ", style="bold bright_black")
    text.append(story.title, style="bold")
    host = domain(story.url)
    if host:
        text.append(f" ({host})", style="italic blue")
    return text


def story_stats(story: Story, now: Optional[datetime] = None) -> Text:
    text = Text("    ")
    text.append(f"▲ {story.score:3}", style="bold green")
    text.append(SEPARATOR, style="bright_black")
    text.append(f"👤 {story.author}", style="magenta")
    text.append(SEPARATOR, style="bright_black")
    text.append(f"💬 {story.comments:2}", style="cyan")
    text.append(SEPARATOR, style="bright_black")
    text.append(f"🕒 {relative_age(story.posted, now)}", style="yellow")
    return text


def story_details(story: Story, now: Optional[datetime] = None) -> Text:
    posted = story.posted.astimezone().strftime("%Y-%m-%d %H:%M")
    text = Text()
    text.append(story.title, style="bold")
    text.append("\n\n")
    rows = [
        ("Author", story.author),
        ("Score", str(story.score)),
        ("Comments", str(story.comments)),
        ("Posted", f"{posted} ({relative_age(story.posted, now)} ago)"),
        ("Link", story.url or "text post"),
        ("Discussion", HN_ITEM_PAGE_URL.format(id=story.id)),
    ]
    for label, value in rows:
        text.append(f"{label:>10}  ", style="bold bright_black")
        text.append(f"{value}\n")
    return text
