"""
Per-application auth services.

init_auth() builds the settings, token issuer and session manager once per
Flask app; request code reaches them through the getters below.
"""
from flask import Flask, current_app

from api.config import AuthSettings
from models import storage
from models.credential_store import CredentialStore
from services.session_manager import SessionManager
from utils.security import TokenIssuer


def init_auth(app: Flask) -> None:
    settings = AuthSettings.from_mapping(app.config)
    issuer = TokenIssuer(settings)
    store = CredentialStore(storage)
    app.extensions["auth_settings"] = settings
    app.extensions["token_issuer"] = issuer
    app.extensions["credential_store"] = store
    app.extensions["session_manager"] = SessionManager(store, issuer, starting_coins=settings.starting_coins)


def get_auth_settings() -> AuthSettings:
    return current_app.extensions["auth_settings"]


def get_token_issuer() -> TokenIssuer:
    return current_app.extensions["token_issuer"]


def get_credential_store() -> CredentialStore:
    return current_app.extensions["credential_store"]


def get_session_manager() -> SessionManager:
    return current_app.extensions["session_manager"]
