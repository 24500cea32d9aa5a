"""
Identity linkage: account -> customer profile.

Every shipment belongs to a Customer row linked 1:1 to the signed-in
account. The row is created on the first shipment submission, using the
sender details of that submission as contact defaults.
"""

import logging
from typing import Mapping

from logistics.models import Customer
from logistics.store import StoreClient

logger = logging.getLogger(__name__)


class CustomerProfileService:
    """
    Resolve or create the customer profile of an account.

    The unique constraint on customers.user_id plus get_or_create (insert,
    and on conflict fetch the existing row) keeps concurrent first
    submissions from creating two profiles.
    """

    DEFAULT_FIELDS = ('full_name', 'email', 'phone', 'address')

    def __init__(self, client: StoreClient):
        self.client = client

    def ensure_customer_profile(self, account_id, defaults: Mapping[str, str]):
        """
        Return the id of the account's customer profile, creating it if absent.

        Args:
            account_id: primary key of the authenticated account
            defaults: contact fields used only when the profile is created
                (full_name, phone, address, email; email defaults to "")

        Raises:
            StorageFailure: the store rejected the lookup or the insert
        """
        values = {field: (defaults.get(field) or '') for field in self.DEFAULT_FIELDS}

        with self.client.request('ensure_customer_profile'):
            customer, created = self.client.table(Customer).get_or_create(
                user_id=account_id,
                defaults=values,
            )

        if created:
            logger.info(f"Customer profile {customer.id} created for account {account_id}")
        return customer.id

    def find_customer_id(self, account_id):
        """Customer id linked to the account, or None when it has none yet."""
        with self.client.request('find_customer_profile'):
            return (
                self.client.table(Customer)
                .filter(user_id=account_id)
                .values_list('id', flat=True)
                .first()
            )
