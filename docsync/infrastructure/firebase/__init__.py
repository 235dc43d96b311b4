"""Firestore integration: REST client and the Firestore data driver."""

from docsync.infrastructure.firebase._rest_client import FirestoreRESTClient
from docsync.infrastructure.firebase.client import (
    create_firestore_client,
    load_service_account,
)
from docsync.infrastructure.firebase.driver import FirestoreDataDriver

__all__ = [
    "FirestoreDataDriver",
    "FirestoreRESTClient",
    "create_firestore_client",
    "load_service_account",
]
