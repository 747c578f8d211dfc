"""
config/firebase.py
Firebase Admin SDK bootstrap. Firestore, Auth and FCM all share one app.
"""

import logging

import firebase_admin
from firebase_admin import credentials

from config.settings import settings

logger = logging.getLogger(__name__)


def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    if firebase_admin._apps:
        return firebase_admin.get_app()

    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    try:
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    except (IOError, ValueError):
        # Fall back to application default credentials (Cloud Run, GCF, ...)
        logger.info("Firebase credentials file not usable, using application default credentials")
        cred = credentials.ApplicationDefault()

    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase app initialized")
    return app
