"""
Custom CSS sanitizer.

Custom CSS is printed into a <style> element, so the only thing that can
break out of it is markup. Any opening or closing tag makes the CSS unsafe;
CSS without tags is returned exactly as given.
"""

import re

# "<p", "</style", "<script" ... A bare "<" is not a tag.
MARKUP_PATTERN = re.compile(r"</?\w+")

# A whole tag, up to its closing ">" when it has one.
_TAG_PATTERN = re.compile(r"</?\w+[^<>]*>?")


def contains_markup(css: str) -> bool:
    """Check whether CSS contains an HTML tag."""
    return MARKUP_PATTERN.search(css) is not None


def filter_css(css: str) -> tuple[str, bool]:
    """
    Strip HTML tags from CSS.

    Args:
        css: Raw CSS as submitted

    Returns:
        Tuple of (filtered CSS, whether anything was stripped). The filtered
        CSS equals the input when nothing was stripped.
    """
    if not contains_markup(css):
        return css, False

    filtered = _TAG_PATTERN.sub("", css)
    return filtered, filtered != css
