"""Generic keyed entity store over the SQLAlchemy session."""
import logging
from contextlib import contextmanager

from rackbracket.app import db

logger = logging.getLogger(__name__)


class EntityStore:
    """get / partial update / bulk insert / compound query, plus transactions.

    ``transaction()`` is reentrant: only the outermost block commits, and any
    exception escaping it rolls the whole unit back before propagating.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self._depth = 0

    def get(self, model, entity_id):
        if entity_id is None:
            return None
        return self.session.get(model, entity_id)

    def update(self, model, entity_id, **fields):
        entity = self.get(model, entity_id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        return entity

    def bulk_insert(self, rows):
        rows = list(rows)
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def query(self, model, order_by=None, **filters):
        query = self.session.query(model).filter_by(**filters)
        for column_name in order_by or ():
            query = query.order_by(getattr(model, column_name).asc())
        return query.all()

    def first(self, model, **filters):
        return self.session.query(model).filter_by(**filters).first()

    def delete(self, entity):
        self.session.delete(entity)

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self
            self.session.commit()
        except Exception:
            logger.debug('Rolling back bracket transaction', exc_info=True)
            self.session.rollback()
            raise
        finally:
            self._depth = 0
