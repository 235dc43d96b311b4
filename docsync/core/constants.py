"""Core constants: tree sentinels and shared literal values."""

# parent_id of a collection that has no owning collection
ROOT_PARENT_ID = "__root__"

# Separator between path segments (parent path + "/" + name)
PATH_SEP = "/"

# Pseudo-field addressing a document's key inside a QueryFilter
KEY_FIELD = "__key__"

# Channel delimiter for pub/sub notifiers (<prefix>:<path>)
CHANNEL_SEP = ":"
