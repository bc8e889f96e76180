"""Session state collaborators: the session store and in-flight runs."""
from src.state.runs import ActiveRunRegistry
from src.state.session_store import SessionEntry, SessionStore, SessionStoreError, load_session_store
__all__ = ["ActiveRunRegistry", "SessionEntry", "SessionStore", "SessionStoreError", "load_session_store"]
