"""
Store client for SWIFTSHIP repositories.

A StoreClient is an explicit handle on one database alias. Repositories
receive it at construction time and issue every query through it, so the
store a repository talks to is decided by whoever builds the repository.
"""

import logging
from contextlib import contextmanager

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from .exceptions import StorageFailure

logger = logging.getLogger(__name__)


class StoreClient:
    """
    Handle on the backing relational store.

    Args:
        alias: Django database alias (key of settings.DATABASES)
    """

    def __init__(self, alias: str = DEFAULT_DB_ALIAS):
        self.alias = alias

    def __repr__(self):
        return f"StoreClient(alias={self.alias!r})"

    def table(self, model):
        """Manager for `model` bound to this client's database."""
        return model._default_manager.db_manager(self.alias)

    def atomic(self):
        """Transaction (or savepoint when nested) on this client's database."""
        return transaction.atomic(using=self.alias)

    @contextmanager
    def request(self, operation: str):
        """
        Scope one store request.

        Any database error raised inside the block is logged and re-raised
        as StorageFailure tagged with `operation`. Querysets must be
        evaluated inside the block.
        """
        try:
            yield self
        except DatabaseError as exc:
            logger.error(f"Store request '{operation}' failed on '{self.alias}': {exc}")
            raise StorageFailure(operation) from exc


def get_store_client() -> StoreClient:
    """Build a client for the configured shipment store."""
    return StoreClient(alias=getattr(settings, 'SWIFTSHIP_STORE_ALIAS', DEFAULT_DB_ALIAS))
