"""Server-side client for Firebase Auth, Realtime Database and Cloud Messaging."""

import logging

from fireadmin.app import App, initialize_app
from fireadmin.services.auth import Auth
from fireadmin.services.database import Database, Reference, ServerValue
from fireadmin.services.messaging import Messaging
from fireadmin.services.snapshots import DataSnapshot

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "App",
    "Auth",
    "DataSnapshot",
    "Database",
    "Messaging",
    "Reference",
    "ServerValue",
    "initialize_app",
]
