# shared_db/services/schema_store.py
import logging
from contextlib import contextmanager
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import Uuid, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError, StatementError
from sqlalchemy.orm import Session

from shared_db.core.database import make_session_factory
from shared_db.core.exceptions import (
    DomainViolation, NotFound, PrecisionLoss, ReferentialIntegrityViolation,
    SchemaStoreError, UniquenessConflict,
)
from shared_db.models.definition import Entity, SchemaDefinition
from shared_db.models.enums import OrderStatus
from shared_db.models.schemas import InsertShape, NewOrderItem, OrderStatusHistoryRecord, line_total
from shared_db.models.sql_models import MenuItem, Order, OrderItem, OrderStatusHistory

logger = logging.getLogger(__name__)

# --- Error translation ---
# Postgres SQLSTATE codes; SQLite has none, so its message text is matched instead
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NUMERIC_OUT_OF_RANGE = "22003"

PRECISION_ERROR_TYPES = {"decimal_max_digits", "decimal_max_places", "decimal_whole_digits"}

# Columns the store owns; callers never write them
SERVER_GENERATED = {"id", "created_at", "updated_at", "changed_at"}


def _sqlstate(exc: StatementError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_db_error(exc: SQLAlchemyError) -> Optional[SchemaStoreError]:
    """Map a driver error onto the store's error taxonomy, or None if it isn't one."""
    code = _sqlstate(exc)
    message = str(getattr(exc, "orig", None) or exc)
    lowered = message.lower()

    if isinstance(exc, IntegrityError):
        if code == UNIQUE_VIOLATION or "unique constraint" in lowered:
            return UniquenessConflict(message)
        if code == FOREIGN_KEY_VIOLATION or "foreign key constraint" in lowered:
            return ReferentialIntegrityViolation(message)
        # NOT NULL and CHECK failures
        return DomainViolation(message)
    if code == NUMERIC_OUT_OF_RANGE:
        return PrecisionLoss(message)
    if isinstance(exc, DataError):
        return DomainViolation(message)
    if isinstance(exc, StatementError) and isinstance(exc.orig, LookupError):
        # SQLAlchemy Enum rejected a value outside the declared set
        return DomainViolation(message)
    return None


def translate_validation_error(exc: ValidationError) -> DomainViolation:
    if any(err["type"] in PRECISION_ERROR_TYPES for err in exc.errors()):
        return PrecisionLoss(str(exc))
    return DomainViolation(str(exc))


def _as_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise DomainViolation(f"Not a valid identifier: {value!r}") from exc


class SchemaStore:
    """Writes and reads the food-delivery entities under the schema's rules.

    Every public method runs in its own transaction: it either applies
    completely or raises a ``SchemaStoreError`` subclass and leaves nothing
    behind.
    """

    def __init__(self, engine: Engine, schema: SchemaDefinition):
        self.engine = engine
        self.schema = schema
        self._session_factory = make_session_factory(engine)

    # --- DDL ---
    def create_all(self) -> None:
        self.schema.metadata.create_all(self.engine)
        logger.info("Created %d tables", len(self.schema.metadata.tables))

    def drop_all(self) -> None:
        self.schema.metadata.drop_all(self.engine)
        logger.info("Dropped %d tables", len(self.schema.metadata.tables))

    # --- Transactions ---
    @contextmanager
    def session(self):
        db: Session = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            translated = translate_db_error(exc)
            if translated is None:
                raise
            logger.warning("Rejected write (%s): %s", type(translated).__name__, translated)
            raise translated from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _validate(self, shape_cls, data: dict):
        try:
            return shape_cls.model_validate(data)
        except ValidationError as exc:
            raise translate_validation_error(exc) from exc

    def _entity(self, key) -> Entity:
        try:
            return self.schema.entity(key)
        except KeyError as exc:
            raise DomainViolation(str(exc)) from exc

    # --- Writes ---
    def insert(self, entity, data=None, **fields):
        """Insert one row and return its record shape.

        ``entity`` is an ORM class, an insert-shape class, or an insert-shape
        instance (then ``data``/``fields`` are ignored).
        """
        if isinstance(entity, InsertShape):
            ent = self._entity(type(entity))
            shape = entity
        else:
            ent = self._entity(entity)
            shape = self._validate(ent.insert, {**(data or {}), **fields})

        # None means "not supplied": the column default applies
        values = shape.model_dump(exclude_none=True)

        with self.session() as db:
            if ent.model is OrderItem:
                values = self._complete_order_item(db, values)
            row = ent.model(**values)
            db.add(row)
            db.flush()
            db.refresh(row)
            record = ent.record.model_validate(row)
        logger.debug("Inserted %s %s", ent.name, record.id)
        return record

    def _complete_order_item(self, db: Session, values: dict) -> dict:
        # Name and price are copied so later menu edits leave old orders alone
        if "menu_item_name" not in values or "unit_price" not in values:
            menu_item = db.get(MenuItem, values["menu_item_id"])
            if menu_item is None:
                raise ReferentialIntegrityViolation(f"Menu item {values['menu_item_id']} does not exist")
            values.setdefault("menu_item_name", menu_item.name)
            values.setdefault("unit_price", menu_item.price)
        if values.get("total_price") is None:
            values["total_price"] = line_total(values["quantity"], values["unit_price"])
        # Snapshotted and computed values go through the same checks as caller input
        return self._validate(NewOrderItem, values).model_dump(exclude_none=True)

    def update(self, entity, id, **changes):
        ent = self._entity(entity)
        if ent.append_only:
            raise DomainViolation(f"{ent.name} rows are append-only")
        protected = SERVER_GENERATED & set(changes)
        if protected:
            raise DomainViolation(f"Cannot write server-generated fields: {sorted(protected)}")

        with self.session() as db:
            row = db.get(ent.model, _as_uuid(id))
            if row is None:
                raise NotFound(f"{ent.name} {id} does not exist")

            current = {name: getattr(row, name) for name in ent.insert.model_fields}
            merged = {**current, **changes}
            written = set(changes)
            if ent.model is OrderItem and "total_price" not in changes and {"quantity", "unit_price"} & written:
                merged["total_price"] = None
            shape = self._validate(ent.insert, merged)
            validated = shape.model_dump()
            if ent.model is OrderItem:
                if validated["total_price"] is None:
                    written.add("total_price")
                validated = self._complete_order_item(db, validated)

            for name in written:
                setattr(row, name, validated[name])
            db.flush()
            db.refresh(row)
            record = ent.record.model_validate(row)
        logger.debug("Updated %s %s: %s", ent.name, record.id, sorted(written))
        return record

    def delete(self, entity, id) -> bool:
        """Delete one row. Cascading children go with it in the same statement;
        a restricting child makes the whole delete fail."""
        ent = self._entity(entity)
        if ent.append_only:
            raise DomainViolation(f"{ent.name} rows are append-only")
        with self.session() as db:
            result = db.execute(delete(ent.model).where(ent.model.id == _as_uuid(id)))
            deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted %s %s", ent.name, id)
        return deleted

    def record_status(self, order_id, status, notes: Optional[str] = None) -> OrderStatusHistoryRecord:
        """Set an order's status and append the matching history row together.

        Transition legality is left to the caller (see
        ``OrderStatus.can_transition_to``).
        """
        ent = self._entity(OrderStatusHistory)
        shape = self._validate(ent.insert, {"order_id": order_id, "status": status, "notes": notes})
        with self.session() as db:
            order = db.get(Order, shape.order_id)
            if order is None:
                raise ReferentialIntegrityViolation(f"Order {shape.order_id} does not exist")
            previous = order.status
            order.status = shape.status
            entry = OrderStatusHistory(order_id=order.id, status=shape.status, notes=shape.notes)
            db.add(entry)
            db.flush()
            db.refresh(entry)
            record = ent.record.model_validate(entry)
        logger.info("Order %s: %s -> %s", shape.order_id, OrderStatus(previous).value, shape.status.value)
        return record

    # --- Reads ---
    def get(self, entity, id):
        ent = self._entity(entity)
        with self.session() as db:
            row = db.get(ent.model, _as_uuid(id))
            return ent.record.model_validate(row) if row is not None else None

    def list(self, entity, **filters) -> List:
        ent = self._entity(entity)
        columns = ent.model.__mapper__.columns
        unknown = set(filters) - set(columns.keys())
        if unknown:
            raise DomainViolation(f"Unknown {ent.name} fields: {sorted(unknown)}")
        filters = {
            name: _as_uuid(value) if value is not None and isinstance(columns[name].type, Uuid) else value
            for name, value in filters.items()
        }
        stmt = select(ent.model).filter_by(**filters).order_by(getattr(ent.model, ent.order_by))
        with self.session() as db:
            return [ent.record.model_validate(row) for row in db.scalars(stmt)]
