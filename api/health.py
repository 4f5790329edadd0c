from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.version import __version__
from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Liveness plus a database round trip
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database reachable
        schema:
          type: object
          properties:
            status: { type: string, example: ok }
            database: { type: string, example: ok }
            version: { type: string, example: 1.0.0 }
      503:
        description: Database unreachable
    """
    try:
        storage.get_session().execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("health check: database unreachable")
        storage.rollback()
        return {"status": "degraded", "database": "unavailable", "version": __version__}, 503
    return {"status": "ok", "database": "ok", "version": __version__}, 200
