# ABOUTME: Compiled regular expressions used by the readability extractor.
# ABOUTME: Compiled once at import time and only read afterwards.

import re

BYLINE = re.compile(r"byline|author|dateline|writtenby|p-author", re.IGNORECASE)
POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE = re.compile(
    r"hidden|\bhid\b|banner|combx|comment|com-|contact|foot(er)?|footnote|gdpr|masthead|media"
    r"|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|shopping"
    r"|tags|tool|widget",
    re.IGNORECASE,
)
UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|footer"
    r"|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|sidebar|skyscraper|social"
    r"|sponsor|supplemental|ad-break|agegate|pagination|pager|popup|yom-remote",
    re.IGNORECASE,
)
OK_MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
VIDEOS = re.compile(
    r"//(www\.)?((dailymotion|youtube|youtube-nocookie|player\.vimeo|v\.qq)\.com"
    r"|(archive|upload\.wikimedia)\.org|player\.twitch\.tv)",
    re.IGNORECASE,
)
IMG_EXT = re.compile(r"\.(jpg|jpeg|png|webp)", re.IGNORECASE)
SRCSET = re.compile(r"\.(jpg|jpeg|png|webp)\s+\d")
SRC = re.compile(r"^\s*\S+\.(jpg|jpeg|png|webp)\S*\s*$")
SHARE_ELEMENTS = re.compile(r"(\b|_)(share|sharedaddy)(\b|_)", re.IGNORECASE)
NODE_CONTENT = re.compile(r"\.( |$)")
HAS_CONTENT = re.compile(r"\S$")
B64_DATA_URL = re.compile(r"^data:\s*([^\s;,]+)\s*;\s*base64\s*", re.IGNORECASE)
BASE64 = re.compile(r"base64\s*", re.IGNORECASE)
NORMALIZE = re.compile(r"\s{2,}")
DISPLAY_HIDDEN = re.compile(r"display\s*:\s*(none|hidden)", re.IGNORECASE)

# Titles
TITLE_SEPARATOR = re.compile(r" [\|\-\\/>»] ")
HAS_TITLE_SEPARATOR = re.compile(r" [\\/>»] ")
TITLE_START_SEPARATOR = re.compile(r"(.*)[\|\-\\/>»] .*")
TITLE_END_SEPARATOR = re.compile(r"[^\|\-\\/>»]*[\|\-\\/>»](.*)")
TITLE_MULTI_SEPARATOR = re.compile(r"[\|\-\\/>»]+")

# Metadata
NAME_PATTERN = re.compile(
    r"^\s*(?:(dc|dcterm|og|twitter|weibo:(article|webpage))\s*[\.:]\s*)?"
    r"(author|creator|description|title|site_name)\s*$",
    re.IGNORECASE,
)
PROPERTY_PATTERN = re.compile(
    r"\s*(dc|dcterm|og|twitter)\s*:\s*(author|creator|description|title|site_name)\s*",
    re.IGNORECASE,
)
HTML_ESCAPE = re.compile(r"&(quot|amp|apos|lt|gt);")
NUMERIC_ESCAPE = re.compile(r"&#(?:x([0-9a-z]{1,4})|([0-9]{1,4}));", re.IGNORECASE)

HTML_ESCAPE_MAP = {"lt": "<", "gt": ">", "amp": "&", "quot": '"', "apos": "'"}


def unescape_html_entities(value: str) -> str:
    """Decode the named and numeric entities commonly left in <meta> content."""
    value = HTML_ESCAPE.sub(lambda m: HTML_ESCAPE_MAP[m.group(1)], value)

    def _numeric(match: re.Match) -> str:
        code = int(match.group(1), 16) if match.group(1) else int(match.group(2))
        if code == 0 or code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
            code = 0xFFFD
        return chr(code)

    return NUMERIC_ESCAPE.sub(_numeric, value)
