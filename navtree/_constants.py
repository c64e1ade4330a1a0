"""Common literal values used across navtree.

These constants keep filenames, variable names, and default messages
centralized so the writer, reader, and tests share the same values without
drifting. Intended for internal use within the navtree package.

Examples
--------
>>> from navtree import _constants
>>> _constants.INDEX_SHARD_TEMPLATE.format(number=0)
'navtreeindex0.js'
>>> _constants.INDEX_SHARD_VAR_TEMPLATE.format(var="NAVTREEINDEX", number=3)
'NAVTREEINDEX3'
"""

NAVTREE_DATA_FILENAME = "navtreedata.js"
INDEX_SHARD_TEMPLATE = "navtreeindex{number}.js"
INDEX_SHARD_VAR_TEMPLATE = "{var}{number}"
SUBTREE_FILE_SUFFIX = ".js"

DEFAULT_TREE_VAR = "NAVTREE"
DEFAULT_INDEX_VAR = "NAVTREEINDEX"
DEFAULT_SHARD_SIZE = 250

SYNC_ON_KEY = "SYNCONMSG"
SYNC_OFF_KEY = "SYNCOFFMSG"
DEFAULT_MESSAGES: dict[str, str] = {
    SYNC_ON_KEY: "click to disable panel synchronisation",
    SYNC_OFF_KEY: "click to enable panel synchronisation",
}
