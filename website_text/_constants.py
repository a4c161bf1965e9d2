"""Common literal values used across website_text.

These constants keep cache key templates, meta names, and defaults
centralized so the generator, the summary tree, and tests can import the
same values without drifting. Intended for internal use within the
website_text package.

Examples
--------
>>> from website_text import _constants
>>> _constants.CACHE_KEY_GENERATOR.format(key="abc")
'_WEBSITE_TEXT_GENERATOR_abc'
>>> "index" in _constants.DEFAULT_INDEX_PAGES
True
"""

CACHE_KEY_GENERATOR = "_WEBSITE_TEXT_GENERATOR_{key}"
CACHE_KEY_DOCUMENT = "_WEBSITE_TEXT_DOCUMENT_{key}"

DEFAULT_INDEX_PAGES = ("index", "index.html")

# Loaders decode every source to text with this encoding; the HTML shell
# used during treatment declares it.
SOURCE_ENCODING = "utf-8"

META_URL = "url"
META_INDEX = "index"
META_INDEX_ORDER = "index-order"
META_INDEX_VISIBLE = "index-visible"
INDEX_SEPARATOR = ";"

DEFAULT_EXTERNAL_REL = "noopener"
