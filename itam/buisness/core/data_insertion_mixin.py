"""
Dictionary-driven row creation for the seed data loaders

Mixed into the data models; sits in the business layer because it fills
the audit columns (created_by_id / updated_by_id).
"""

from sqlalchemy import inspect
from itam import db
from itam.logger import get_logger

logger = get_logger("itam.buisness.core.data_insertion")

TIMESTAMP_FIELDS = ('created_at', 'updated_at')


class DataInsertionMixin:

    @classmethod
    def column_keys(cls):
        return {column.key for column in inspect(cls).columns}

    @classmethod
    def from_dict(cls, values, user_id=None, skip_fields=()):
        """
        Build an unsaved instance from a dict.

        Unknown keys are dropped, a 'password' key is hashed through
        set_password, and user_id stamps the audit columns.
        """
        keys = cls.column_keys()
        kwargs = {
            key: value for key, value in values.items()
            if key in keys and key not in skip_fields
            and not (key in TIMESTAMP_FIELDS and value is None)
        }
        instance = cls(**kwargs)

        if values.get('password') and hasattr(instance, 'set_password'):
            instance.set_password(values['password'])

        if user_id is not None:
            if 'created_by_id' in keys and not instance.created_by_id:
                instance.created_by_id = user_id
            if 'updated_by_id' in keys:
                instance.updated_by_id = user_id
        return instance

    @classmethod
    def create_from_dict(cls, values, user_id=None, skip_fields=(), commit=True):
        """Add a new row; flushes instead of committing when commit is False"""
        instance = cls.from_dict(values, user_id, skip_fields)
        db.session.add(instance)
        try:
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Could not insert {cls.__name__}: {e}")
            raise
        logger.debug(f"Inserted {cls.__name__} {instance}")
        return instance

    @classmethod
    def find_or_create_from_dict(cls, values, user_id=None, skip_fields=(), lookup_fields=None, commit=True):
        """
        Return (row, created).

        The row is looked up by lookup_fields, defaulting to the unique
        columns present in values; nothing to look up by means always create.
        """
        if lookup_fields is None:
            lookup_fields = [column.key for column in inspect(cls).columns
                             if column.unique and column.key in values]
        criteria = {field: values[field] for field in lookup_fields if field in values}

        if criteria:
            existing = cls.query.filter_by(**criteria).first()
            if existing is not None:
                return existing, False
        return cls.create_from_dict(values, user_id, skip_fields, commit), True
