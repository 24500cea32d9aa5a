import uuid
from django.db import models
from django.utils import timezone


class ContactMessageStatus(models.TextChoices):
    NEW = 'new', 'New'
    READ = 'read', 'Read'
    ANSWERED = 'answered', 'Answered'
    ARCHIVED = 'archived', 'Archived'


class ContactMessage(models.Model):
    """
    Message left through the public contact form.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150, verbose_name="Name")
    email = models.EmailField(max_length=254, verbose_name="E-mail")
    phone = models.CharField(max_length=30, null=True, blank=True, verbose_name="Phone")
    subject = models.CharField(max_length=200, verbose_name="Subject")
    message = models.TextField(verbose_name="Message")
    status = models.CharField(
        max_length=20,
        choices=ContactMessageStatus.choices,
        default=ContactMessageStatus.NEW,
        verbose_name="Status"
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'contact_messages'
        verbose_name = "Contact message"
        verbose_name_plural = "Contact messages"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.subject} ({self.email})"
