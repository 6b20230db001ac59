import time

from flask import current_app, jsonify

from classes.errors import NotConfigured


def get_data_store():
    """The app's quiz DataStore; NotConfigured when no database was set up."""
    store = current_app.extensions.get("quiz_store")
    if store is None:
        raise NotConfigured()
    return store


def get_session_registry():
    return current_app.extensions["quiz_sessions"]


def get_clock():
    return current_app.extensions.get("quiz_clock", time.monotonic)


def engine_error_response(error):
    return jsonify(error.to_dict()), error.status_code
