# =============================================================================
# AgriManage Backend
# services/gateway.py - Persistence Gateway
#
# One Repository per entity type with a uniform create / read / list /
# update / delete contract. Writes are validated before they reach the
# session and rolled back as a whole on any failure.
# =============================================================================

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from agrimanage.extensions import db
from agrimanage.errors import (
    AppError,
    NotFound,
    PersistenceError,
    ReferentialIntegrityError,
    UnexpectedShapeError,
    ValidationError,
)


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class Repository:
    """
    CRUD gateway over a single model.

    The model declares API_FIELDS (API name -> column attribute),
    REQUIRED_FIELDS and optionally IMMUTABLE_FIELDS; list normalization and
    type coercion live in the model's validators, so every write path
    applies them.

    Args:
        model: SQLAlchemy model class
        label: Human readable entity name used in messages ('Disease')
        parent_field: API name of the foreign key to the parent, if any
        parent_model: Model the foreign key must reference
        children: (child_model, foreign_key_attribute) pairs that block a
            delete while any child row references the record
    """

    def __init__(self, model, label, parent_field=None, parent_model=None, children=()):
        self.model = model
        self.label = label
        self.parent_field = parent_field
        self.parent_model = parent_model
        self.children = tuple(children)

    # =========================================================================
    # Reads
    # =========================================================================

    def query(self):
        return self.model.query

    def get_by_id(self, record_id):
        record = db.session.get(self.model, record_id)
        if record is None:
            raise NotFound(f'{self.label} not found')
        return record

    def list_by_parent(self, parent_id):
        """
        Return all records whose foreign key equals parent_id.

        An unknown parent simply yields an empty list.
        """
        if self.parent_field is None:
            raise TypeError(f'{self.label} has no parent relationship')

        column = getattr(self.model, self.model.API_FIELDS[self.parent_field])
        return self.model.query.filter(column == parent_id).order_by(self.model.id).all()

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, payload):
        """
        Validate and persist a new record.

        Raises:
            UnexpectedShapeError: payload is not a JSON object
            ValidationError: missing required fields, bad values, or a
                parent reference that does not exist
            PersistenceError: the store rejected the write
        """
        payload = self._require_mapping(payload)

        missing = [
            field for field in self.model.REQUIRED_FIELDS
            if _is_blank(payload.get(field))
        ]
        if missing:
            raise ValidationError(
                'Missing required fields',
                details={'missing_fields': missing}
            )

        if self.parent_field is not None:
            self._check_parent(payload[self.parent_field])

        def build():
            record = self.model()
            self._assign(record, payload, self.model.API_FIELDS)
            db.session.add(record)
            return record

        record = self.write(build)
        current_app.logger.info(f"{self.label} created: ID={record.id}")
        return record

    def update(self, record_id, payload):
        """
        Replace the mutable fields present in the payload.

        Fields left out of the payload keep their stored values; the parent
        reference and the id cannot be changed.
        """
        payload = self._require_mapping(payload)
        record = self.get_by_id(record_id)

        immutable = getattr(self.model, 'IMMUTABLE_FIELDS', ())
        mutable = {
            name: attr for name, attr in self.model.API_FIELDS.items()
            if name not in immutable
        }

        blanked = [
            field for field in self.model.REQUIRED_FIELDS
            if field in payload and field in mutable and _is_blank(payload[field])
        ]
        if blanked:
            raise ValidationError(
                'Required fields cannot be empty',
                details={'missing_fields': blanked}
            )

        def apply():
            self._assign(record, payload, mutable)
            return record

        record = self.write(apply)
        current_app.logger.info(f"{self.label} updated: ID={record.id}")
        return record

    def delete(self, record_id):
        """
        Delete a record by id.

        Raises:
            NotFound: no record with this id
            ReferentialIntegrityError: child records still reference it
        """
        record = self.get_by_id(record_id)

        for child_model, foreign_key in self.children:
            count = child_model.query.filter(
                getattr(child_model, foreign_key) == record.id
            ).count()
            if count:
                raise ReferentialIntegrityError(
                    f'{self.label} still has {count} dependent '
                    f'{child_model.__name__.lower()} record(s)',
                    details={'dependents': child_model.__name__, 'count': count}
                )

        def remove():
            db.session.delete(record)
            return record

        self.write(remove)
        current_app.logger.info(f"{self.label} deleted: ID={record_id}")
        return record

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_mapping(self, payload):
        if not isinstance(payload, dict):
            raise UnexpectedShapeError(
                'Request body must be a JSON object',
                details={'received': type(payload).__name__}
            )
        return payload

    def _check_parent(self, parent_id):
        if isinstance(parent_id, bool):
            parent_id = None
        try:
            parent_id = int(parent_id)
        except (TypeError, ValueError):
            raise ValidationError(
                f'{self.parent_field} must be an integer id',
                details={'field': self.parent_field}
            )

        if db.session.get(self.parent_model, parent_id) is None:
            raise ValidationError(
                f'{self.parent_field} does not reference an existing '
                f'{self.parent_model.__name__.lower()}',
                details={'field': self.parent_field, 'value': parent_id}
            )

    def _assign(self, record, payload, fields):
        structured = getattr(self.model, 'STRUCTURED_FIELDS', ())
        for name, attr in fields.items():
            if name not in payload:
                continue
            value = payload[name]
            if isinstance(value, (dict, list)) and name not in structured:
                raise UnexpectedShapeError(
                    f'{name} must be a single value',
                    details={'field': name, 'received': type(value).__name__}
                )
            if isinstance(value, str):
                value = value.strip()
            if name == self.parent_field:
                value = int(value)
            setattr(record, attr, value)

    def write(self, operation):
        """Run operation and commit, rolling back everything on failure."""
        try:
            result = operation()
            db.session.commit()
            return result
        except AppError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"{self.label} write failed: {e}")
            raise PersistenceError(f'Could not save {self.label.lower()}')
