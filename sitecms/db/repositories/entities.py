from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sitecms.domain.errors import ConflictError
from sitecms.domain.resources import FieldKind, ResourceSpec

_CONTAINER_KINDS = (FieldKind.LIST, FieldKind.ASSETS, FieldKind.MAPPING)


def _serialize(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class EntityRepository:
    """Repository for one content resource, driven by its ResourceSpec."""

    def __init__(self, db: Session, model: type, spec: ResourceSpec):
        self.db = db
        self.model = model
        self.spec = spec

    def _column(self, field_name: str):
        if field_name == "createdAt":
            return self.model.created_at
        if field_name == "updatedAt":
            return self.model.updated_at
        spec = self.spec.get_field(field_name)
        if spec is None:
            raise KeyError(f"Unknown field for {self.spec.name}: {field_name}")
        return getattr(self.model, spec.column)

    def _filtered(self, filters: Optional[Dict[str, Any]]):
        query = self.db.query(self.model)
        for field_name, value in (filters or {}).items():
            if value is None:
                continue
            query = query.filter(self._column(field_name) == value)
        return query

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Any], int]:
        """
        List entities matching ``filters`` in the resource's sort order.

        Args:
            filters: Mapping of field name to required value
            offset: Number of rows to skip
            limit: Maximum rows to return (None for all)

        Returns:
            Tuple of (rows, total matching count)
        """
        query = self._filtered(filters)
        total = query.count()
        for field_name, descending in self.spec.order_by:
            column = self._column(field_name)
            query = query.order_by(column.desc() if descending else column.asc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def get(self, entity_id: str) -> Optional[Any]:
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def find_one(self, **filters: Any) -> Optional[Any]:
        return self._filtered(filters).first()

    def create(self, values: Dict[str, Any]) -> Any:
        """
        Create a new entity.

        Args:
            values: Field values keyed by field name

        Returns:
            Created row

        Raises:
            ConflictError: If a unique field (e.g. a content section) is already taken
        """
        row = self.model()
        self._assign(row, values)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(f"{self.spec.label} already exists") from exc
        self.db.refresh(row)
        return row

    def update(self, row: Any, values: Dict[str, Any]) -> Any:
        self._assign(row, values)
        self.db.commit()
        self.db.refresh(row)
        return row

    def update_where(self, values: Dict[str, Any], exclude_id: Optional[str] = None) -> int:
        """Apply ``values`` to every row except ``exclude_id``."""
        query = self.db.query(self.model)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        columns = {self._column(name): value for name, value in values.items()}
        count = query.update(columns, synchronize_session=False)
        self.db.commit()
        return count

    def delete(self, row: Any) -> bool:
        self.db.delete(row)
        self.db.commit()
        return True

    def delete_all(self) -> int:
        count = self.db.query(self.model).delete()
        self.db.commit()
        return count

    def _assign(self, row: Any, values: Dict[str, Any]) -> None:
        for field_name, value in values.items():
            spec = self.spec.get_field(field_name)
            if spec is None:
                continue
            setattr(row, spec.column, value)

    def to_dict(self, row: Any) -> Dict[str, Any]:
        """Serialize a row into the API's camelCase entity shape."""
        data: Dict[str, Any] = {"id": row.id}
        for spec in self.spec.fields:
            value = getattr(row, spec.column)
            if value is None:
                value = spec.initial_value() if spec.kind in _CONTAINER_KINDS else None
            data[spec.name] = _serialize(value)
        if hasattr(row, "version"):
            data["version"] = row.version
        data["createdAt"] = _serialize(row.created_at)
        data["updatedAt"] = _serialize(row.updated_at)
        return data
