import logging
from typing import Mapping

from logistics.exceptions import ValidationFailure
from logistics.store import StoreClient
from .models import ContactMessage, ContactMessageStatus
from .serializers import ContactMessageCreateSerializer

logger = logging.getLogger(__name__)


class ContactService:
    """
    Contact-form submissions and their triage status.
    """

    def __init__(self, client: StoreClient):
        self.client = client

    def submit_contact_message(self, data: Mapping[str, str]) -> ContactMessage:
        """
        Store a contact-form message with status "new".

        Raises:
            ValidationFailure: a required field is blank or the e-mail is malformed
            StorageFailure: the insert failed
        """
        serializer = ContactMessageCreateSerializer(data=data)
        if not serializer.is_valid():
            logger.info(f"Contact message rejected: {sorted(serializer.errors)}")
            raise ValidationFailure(serializer.errors, "Please fill in all required fields.")
        values = serializer.validated_data

        with self.client.request('submit_contact_message'):
            message = self.client.table(ContactMessage).create(
                name=values['name'],
                email=values['email'],
                phone=values.get('phone') or None,
                subject=values['subject'],
                message=values['message'],
                status=ContactMessageStatus.NEW,
            )

        logger.info(f"Contact message {message.id} received from {message.email}")
        return message

    def set_status(self, message_ids, status: str) -> int:
        """Move messages to another triage status. Returns the number updated."""
        if status not in ContactMessageStatus.values:
            raise ValidationFailure({'status': [f"Unknown status: {status}"]})

        with self.client.request('set_contact_message_status'):
            return self.client.table(ContactMessage).filter(pk__in=list(message_ids)).update(status=status)
