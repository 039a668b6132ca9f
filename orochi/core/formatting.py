"""
orochi/core/formatting.py
═══════════════════════════════════════════════════════════════════════════════
Telegram-HTML renderings of AniList entities.

Every user-supplied / remote string goes through escape_html() AFTER being
shortened, so a cut never lands in the middle of an entity like &amp;.
Descriptions come from AniList with stray <br>/<i> tags and ~!spoilers!~;
remove_html() flattens them to plain text with BeautifulSoup first.

Labels are localized through the `t(key, **args)` translator handed in by
the handler.
═══════════════════════════════════════════════════════════════════════════════
"""

import html
import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import pytz
from bs4 import BeautifulSoup

from orochi.core.config import (
    ANILIST_BANNER_URL, ANILIST_SITE, ANILIST_USER_BANNER_URL, BOT_TZ, MAL_SITE,
)
from orochi.core.models import Entity, EntityKind

Translator = Callable[..., str]

_SPOILER_RE  = re.compile(r"~!.*?!~", re.DOTALL)
_NEWLINES_RE = re.compile(r"\n{3,}")

STATUS_EMOJI: dict[str, str] = {
    "FINISHED":         "🏁",
    "RELEASING":        "📆",
    "NOT_YET_RELEASED": "🔜",
    "CANCELLED":        "❌",
    "HIATUS":           "🕰",
}

FORMAT_EMOJI: dict[str, str] = {
    "TV":       "📺",
    "TV_SHORT": "📺",
    "MOVIE":    "🎥",
    "SPECIAL":  "🎌",
    "OVA":      "🎞",
    "ONA":      "🎞",
    "MUSIC":    "🎵",
    "MANGA":    "📚",
    "NOVEL":    "📖",
    "ONE_SHOT": "📖",
}

# Formats whose display name is not just title-cased
_FORMAT_NAMES = {"TV": "TV", "TV_SHORT": "TV Short", "OVA": "OVA", "ONA": "ONA", "ONE_SHOT": "One Shot"}


# ── Text helpers ──────────────────────────────────────────────────────────────

def escape_html(text: Any) -> str:
    return html.escape(str(text), quote=True)


def remove_html(text: Optional[str]) -> str:
    """AniList description → plain text, spoilers dropped, <br> kept as newlines."""
    if not text:
        return ""
    soup = BeautifulSoup(text, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    plain = _SPOILER_RE.sub("", soup.get_text())
    return _NEWLINES_RE.sub("\n\n", plain).strip()


def shorten_text(text: Optional[str], max_length: int) -> str:
    """Cut to at most `max_length` characters, marking the cut with '...'."""
    text = text or ""
    if len(text) <= max_length:
        return text
    return text[: max(max_length - 3, 0)].rstrip() + "..."


def humanize(value: Optional[str]) -> str:
    """'NOT_YET_RELEASED' → 'Not Yet Released'"""
    if not value:
        return ""
    if value in _FORMAT_NAMES:
        return _FORMAT_NAMES[value]
    return value.replace("_", " ").title()


def format_date(date: Optional[Mapping[str, Any]]) -> str:
    """AniList FuzzyDate → 'dd/mm/yyyy'; missing parts are skipped."""
    if not date:
        return ""
    parts = []
    if date.get("day"):
        parts.append(f"{date['day']:02d}")
    if date.get("month"):
        parts.append(f"{date['month']:02d}")
    if date.get("year"):
        parts.append(str(date["year"]))
    return "/".join(parts)


def format_timestamp(ts: Optional[int], tz: pytz.BaseTzInfo = BOT_TZ) -> str:
    if not ts:
        return ""
    return datetime.fromtimestamp(ts, tz=pytz.utc).astimezone(tz).strftime("%d/%m/%Y")


# ── Entity accessors ──────────────────────────────────────────────────────────

def title_of(entity: Entity) -> str:
    if entity.kind in (EntityKind.ANIME, EntityKind.MANGA):
        title = entity.get("title", {})
        return title.get("romaji") or title.get("english") or title.get("native") or str(entity.id)
    if entity.kind is EntityKind.CHARACTER:
        name = entity.get("name", {})
        return name.get("full") or name.get("native") or str(entity.id)
    return entity.get("name") or str(entity.id)


def image_url(entity: Entity) -> str:
    """Large picture shown with the details message."""
    if entity.kind is EntityKind.ANIME:
        return f"{ANILIST_BANNER_URL}{entity.id}"
    if entity.kind is EntityKind.MANGA:
        cover = entity.get("coverImage", {})
        return entity.get("bannerImage") or cover.get("extraLarge") or cover.get("large") or ""
    if entity.kind is EntityKind.CHARACTER:
        return entity.get("image", {}).get("large") or ""
    return f"{ANILIST_USER_BANNER_URL}{entity.id}"


def thumb_url(entity: Entity) -> str:
    """Small picture for inline-query articles."""
    if entity.kind in (EntityKind.ANIME, EntityKind.MANGA):
        cover = entity.get("coverImage", {})
        return cover.get("large") or cover.get("medium") or entity.get("bannerImage") or ""
    if entity.kind is EntityKind.CHARACTER:
        image = entity.get("image", {})
        return image.get("medium") or image.get("large") or ""
    avatar = entity.get("avatar", {})
    return avatar.get("large") or entity.get("bannerImage") or ""


def short_description(entity: Entity, max_length: int = 150) -> str:
    """Plain-text teaser for inline-query article descriptions."""
    field = "about" if entity.kind is EntityKind.USER else "description"
    return shorten_text(remove_html(entity.get(field)), max_length)


def _site_url(entity: Entity) -> str:
    return entity.get("siteUrl") or f"{ANILIST_SITE}/{entity.kind.value}/{entity.id}"


def _header(entity: Entity, subtitle: str = "") -> str:
    text = f"↓ <code>{entity.id}</code> → <b>{escape_html(title_of(entity))}</b>"
    if subtitle:
        text += f" (<i>{escape_html(subtitle)}</i>)"
    return text + "\n\n"


def _line(emoji: str, label: str, value: Any) -> str:
    return f"{emoji} | <b>{label}</b>: <i>{escape_html(value)}</i>\n"


def _dates(entity: Entity, t: Translator) -> str:
    text = ""
    start = format_date(entity.get("startDate"))
    if start:
        text += _line("📅", t("label_start_date"), start)
    end = format_date(entity.get("endDate"))
    if end:
        text += _line("📆", t("label_end_date"), end)
    return text


def _description(entity: Entity, max_length: int, field: str = "description") -> str:
    desc = remove_html(entity.get(field))
    if not desc:
        return ""
    return f"\n<blockquote><i>{escape_html(shorten_text(desc, max_length))}</i></blockquote>\n"


def _links(entity: Entity) -> str:
    text = f"\n🔗 | <a href=\"{escape_html(_site_url(entity))}\">AniList</a>"
    mal_id = entity.get("idMal")
    if mal_id:
        text += f" ↭ <a href=\"{MAL_SITE}/{entity.kind.value}/{mal_id}\">MyAnimeList</a>"
    return text


# ── Detail messages ───────────────────────────────────────────────────────────

def _media_common(entity: Entity, t: Translator) -> str:
    status = entity.get("status")
    fmt    = entity.get("format")
    text   = ""
    if entity.get("averageScore"):
        text += _line("🌟", t("label_score"), f"{entity['averageScore']}%")
    if status:
        text += _line(STATUS_EMOJI.get(status, "❔"), t("label_status"), humanize(status))
    if fmt:
        text += _line(FORMAT_EMOJI.get(fmt, "📖"), t("label_format"), humanize(fmt))
    return text


def anime_info(entity: Entity, t: Translator) -> str:
    text = _header(entity) + _media_common(entity, t)

    if entity.get("episodes"):
        text += _line("🔢", t("label_episodes"), entity["episodes"])
    if entity.get("duration"):
        text += _line("⏱", t("label_duration"), f"{entity['duration']} min")
    studios = [s["name"] for s in entity.get("studios", {}).get("nodes", ()) if s.get("name")]
    if studios:
        text += _line("🎬", t("label_studios"), ", ".join(studios))
    if entity.get("genres"):
        text += _line("🎭", t("label_genres"), ", ".join(entity["genres"]))

    text += _dates(entity, t)
    text += _description(entity, 500)
    return text + _links(entity)


def manga_info(entity: Entity, t: Translator) -> str:
    text = _header(entity) + _media_common(entity, t)

    if entity.get("genres"):
        text += _line("🎭", t("label_genres"), ", ".join(entity["genres"]))
    if entity.get("chapters"):
        text += _line("🔢", t("label_chapters"), entity["chapters"])
    if entity.get("volumes"):
        text += _line("📚", t("label_volumes"), entity["volumes"])

    text += _dates(entity, t)
    text += _description(entity, 300)
    return text + _links(entity)


def character_info(entity: Entity, t: Translator) -> str:
    native = entity.get("name", {}).get("native") or ""
    text = _header(entity, native if native != title_of(entity) else "")

    if entity.get("gender"):
        text += _line("👤", t("label_gender"), entity["gender"])
    if entity.get("age"):
        text += _line("🎂", t("label_age"), entity["age"])
    if entity.get("favourites"):
        text += _line("❤", t("label_favourites"), entity["favourites"])

    media = entity.get("media", {}).get("nodes", ())
    if media:
        titles = [m.get("title", {}).get("romaji") for m in media]
        text += _line("🎬", t("label_appears_in"), ", ".join(x for x in titles if x))

    text += _description(entity, 400)
    return text + _links(entity)


def user_info(entity: Entity, t: Translator) -> str:
    text = _header(entity)

    joined = format_timestamp(entity.get("createdAt"))
    if joined:
        text += _line("📅", t("label_joined_at"), joined)

    stats = entity.get("statistics", {})
    anime = stats.get("anime", {})
    if anime.get("count"):
        text += _line(
            "📺", t("label_anime_stats"),
            f"{anime['count']} · {anime.get('episodesWatched', 0)} ep · {anime.get('meanScore', 0)}",
        )
    manga = stats.get("manga", {})
    if manga.get("count"):
        text += _line(
            "📚", t("label_manga_stats"),
            f"{manga['count']} · {manga.get('chaptersRead', 0)} ch · {manga.get('meanScore', 0)}",
        )

    about = remove_html(entity.get("about"))
    if about:
        text += f"\n<blockquote>{escape_html(shorten_text(about, 250))}</blockquote>\n"

    return text + f"\n🔗 | <a href=\"{escape_html(_site_url(entity))}\">AniList</a>"


RENDERERS: dict[EntityKind, Callable[[Entity, Translator], str]] = {
    EntityKind.ANIME:     anime_info,
    EntityKind.MANGA:     manga_info,
    EntityKind.CHARACTER: character_info,
    EntityKind.USER:      user_info,
}


def render(entity: Entity, t: Translator) -> str:
    return RENDERERS[entity.kind](entity, t)
