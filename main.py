# main.py
import logging

from shared_db.core.config import configure_logging, settings
from shared_db.core.database import make_engine
from shared_db.models.definition import build_schema
from shared_db.services.schema_store import SchemaStore

logger = logging.getLogger("shared_db")


def build_store() -> SchemaStore:
    # The schema is built once here and handed to the store
    engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    return SchemaStore(engine, build_schema())


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    store = build_store()
    store.create_all()
    logger.info("%s ready on %s", settings.PROJECT_NAME, store.engine.url.render_as_string())
    for rel in store.schema.relationships:
        logger.info("FK %s", rel)
