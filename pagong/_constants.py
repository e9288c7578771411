"""Common literal values used across pagong.

These constants keep directory names, file extensions, template markers and
metadata keys centralized so the loader, template engine, generator, and tests
import the same values without drifting. Intended for internal use within the
pagong package.

Examples
--------
>>> from pagong import _constants
>>> _constants.TEMPLATE_OPEN_MARKER + " CONTENTS " + _constants.TEMPLATE_CLOSE_MARKER
'<!--P/ CONTENTS /P-->'
>>> _constants.META_KEY_TITLE
'title'
"""

# Program defaults.
SOURCE_PATH = "content"
TARGET_PATH = "dist"
CONFIG_FILENAME = "pagong.yaml"

# Source file metadata.
SOURCE_META_KEY = "meta"
DATE_FMT = "%Y-%m-%d"
META_KEY_TITLE = "title"
META_KEY_CREATION_DATE = "date"
META_KEY_MODIFIED_DATE = "updated"
META_KEY_CATEGORY = "category"
META_KEY_TAGS = "tags"
META_KEY_TEMPLATE = "template"
META_VALUE_SEPARATORS = ("=", ":")
META_TAG_SEPARATOR = ","

# Template markers.
TEMPLATE_OPEN_MARKER = "<!--P/"
TEMPLATE_CLOSE_MARKER = "/P-->"
DEFAULT_TEMPLATE_NAME = "default.html"
INCLUDE_RAW_EXTENSIONS = ("html", "htm", "svg")

# Blog options.
SOURCE_FILE_EXT = "md"
DIST_FILE_EXT = "html"
STYLE_FILE_EXT = "css"
FEED_FILE_EXT = "atom"
HIGHLIGHT_STYLESHEET = "pygments.css"

# Feed defaults.
FEED_TEMPLATE_NAME = "feed.atom.xml"
FEED_CONTENT_TYPE = "html"
FEED_REL = "self"
FEED_TYPE = "application/atom+xml"
