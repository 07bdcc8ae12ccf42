"""Best-effort video metadata from a YouTube watch page's HTML."""

from typing import Dict

from bs4 import BeautifulSoup

_TITLE_SUFFIX = " - YouTube"


def _clean_title(value: str) -> str:
    value = (value or "").strip()
    if value.endswith(_TITLE_SUFFIX):
        value = value[: -len(_TITLE_SUFFIX)].rstrip()
    return value


def extract_video_metadata(html: str) -> Dict[str, str]:
    """
    Return {"title", "channel"} found in a watch page; missing values are "".

    Tries the rendered DOM first (ytd-watch-metadata), then the server-side
    microdata and meta tags that are present before hydration.
    """
    if not html:
        return {"title": "", "channel": ""}

    soup = BeautifulSoup(html, "html.parser")

    title = ""
    node = soup.select_one("ytd-watch-metadata h1 yt-formatted-string") or soup.select_one("h1.ytd-watch-metadata")
    if node:
        title = node.get_text(" ", strip=True)
    if not title:
        meta = soup.find("meta", attrs={"property": "og:title"}) or soup.find("meta", attrs={"name": "title"})
        if meta and meta.get("content"):
            title = meta["content"]
    if not title and soup.title:
        title = soup.title.get_text(strip=True)

    channel = ""
    node = soup.select_one("ytd-watch-metadata ytd-channel-name a") or soup.select_one("#owner ytd-channel-name a")
    if node:
        channel = node.get_text(" ", strip=True)
    if not channel:
        link = soup.select_one('span[itemprop="author"] link[itemprop="name"]')
        if link and link.get("content"):
            channel = link["content"]

    return {"title": _clean_title(title), "channel": channel.strip()}


__all__ = ["extract_video_metadata"]
