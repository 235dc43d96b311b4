"""Firestore collection and field names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written. Use these constants so names stay
consistent and act as the single source of truth for the "schema".

Example:
    client = get_firestore_client()
    if client:
        await client.collection(COLLECTION_COLLECTIONS).document(cid).get()
"""

# Default Firestore collections (overridable via settings)
COLLECTION_COLLECTIONS = "collections"
COLLECTION_DOCUMENTS = "documents"

# Fields of a collection record
FIELD_NAME = "name"
FIELD_PARENT_ID = "parent_id"

# Fields of a document record
FIELD_KEY = "key"
FIELD_VALUE = "value"
