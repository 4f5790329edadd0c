from models.user import User
from models.login_attempt import LoginAttempt
from models.mfa_code import MfaCode
from models.auth_token import AuthToken
from models.password_reset_token import PasswordResetToken
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError
from os import getenv
from models.base_model import Base
from dotenv import load_dotenv

load_dotenv()
# Map model names for easy querying
classes = {
    "User": User,
    "LoginAttempt": LoginAttempt,
    "MfaCode": MfaCode,
    "AuthToken": AuthToken,
    "PasswordResetToken": PasswordResetToken,
}

DEFAULT_DATABASE_URL = "sqlite:///auth-gateway.db"

class DBStorage:
    __engine = None
    __session = None

    def __init__(self, database_url: str | None = None, echo: bool = False):
        """Remember connection settings; the engine is built lazily by configure()."""
        self.__database_url = database_url or getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.__echo = echo

    def init_app(self, app):
        """Bind to a Flask app: build the engine from its config, create tables, remove sessions on teardown."""
        self.configure(
            app.config.get("DATABASE_URL") or self.__database_url,
            echo=app.config.get("SQLALCHEMY_ECHO", False),
        )
        self.reload()

        @app.teardown_appcontext
        def remove_session(exception=None):
            # scoped_session.remove() returns the connection to the pool
            self.close()

    def configure(self, database_url: str, echo: bool = False):
        """(Re)create the engine. Disposes any previous engine and session."""
        if self.__session is not None:
            self.__session.remove()
        if self.__engine is not None:
            self.__engine.dispose()

        self.__database_url = database_url
        self.__echo = echo
        kwargs = {"echo": echo}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self.__engine = create_engine(database_url, **kwargs)

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def reload(self):
        """Create tables and start session"""
        if self.__engine is None:
            self.configure(self.__database_url, echo=self.__echo)
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def rollback(self):
        """Discard pending changes"""
        if self.__session is not None:
            self.__session.rollback()

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, conditional updates)
    def get_session(self):
        return self.__session
