# shared_db/models/definition.py
"""The schema as one value.

``build_schema()`` is called once at process start and the result is passed
to ``SchemaStore``; nothing downstream looks tables up through globals.
"""
from dataclasses import dataclass
from typing import Tuple, Type

from sqlalchemy import MetaData

from shared_db.core.database import Base
from shared_db.models import schemas
from shared_db.models import sql_models as tables
from shared_db.models.enums import OnDelete


@dataclass(frozen=True)
class Entity:
    model: type
    record: Type[schemas.RecordShape]
    insert: Type[schemas.InsertShape]
    append_only: bool = False
    order_by: str = "created_at"

    @property
    def name(self) -> str:
        return self.model.__name__


@dataclass(frozen=True)
class Relationship:
    child: str
    column: str
    parent: str
    on_delete: OnDelete

    def __str__(self):
        return f"{self.child}.{self.column} -> {self.parent} ({self.on_delete.value})"


@dataclass(frozen=True)
class SchemaDefinition:
    metadata: MetaData
    entities: Tuple[Entity, ...]
    relationships: Tuple[Relationship, ...]

    def entity(self, key) -> Entity:
        """Look an entity up by ORM class, insert shape, or class name."""
        for entity in self.entities:
            if key in (entity.model, entity.insert, entity.name):
                return entity
        raise KeyError(f"Unknown entity: {key!r}")

    def relationship(self, child: str, column: str) -> Relationship:
        for rel in self.relationships:
            if rel.child == child and rel.column == column:
                return rel
        raise KeyError(f"No relationship {child}.{column}")

    def children_of(self, parent: str, on_delete: OnDelete = None):
        return [
            rel for rel in self.relationships
            if rel.parent == parent and (on_delete is None or rel.on_delete is on_delete)
        ]


def _relationships(metadata: MetaData):
    found = []
    for table in metadata.sorted_tables:
        for fk in sorted(table.foreign_keys, key=lambda fk: fk.parent.name):
            # every FK is declared through sql_models.reference(), so ondelete is never empty
            found.append(Relationship(
                child=table.name,
                column=fk.parent.name,
                parent=fk.column.table.name,
                on_delete=OnDelete(fk.ondelete.upper()),
            ))
    return tuple(found)


def build_schema() -> SchemaDefinition:
    entities = (
        Entity(tables.User, schemas.UserRecord, schemas.NewUser),
        Entity(tables.UserSession, schemas.UserSessionRecord, schemas.NewUserSession),
        Entity(tables.Restaurant, schemas.RestaurantRecord, schemas.NewRestaurant),
        Entity(tables.MenuCategory, schemas.MenuCategoryRecord, schemas.NewMenuCategory, order_by="sort_order"),
        Entity(tables.MenuItem, schemas.MenuItemRecord, schemas.NewMenuItem),
        Entity(tables.Order, schemas.OrderRecord, schemas.NewOrder),
        Entity(tables.OrderItem, schemas.OrderItemRecord, schemas.NewOrderItem),
        Entity(
            tables.OrderStatusHistory, schemas.OrderStatusHistoryRecord,
            schemas.NewOrderStatusHistory, append_only=True, order_by="changed_at",
        ),
    )
    return SchemaDefinition(
        metadata=Base.metadata,
        entities=entities,
        relationships=_relationships(Base.metadata),
    )
