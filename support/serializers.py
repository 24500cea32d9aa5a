from rest_framework import serializers

from .models import ContactMessage


class ContactMessageCreateSerializer(serializers.Serializer):
    """Contact form payload."""

    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True, default=None)
    subject = serializers.CharField(max_length=200)
    message = serializers.CharField()

    def validate_email(self, value):
        return value.lower()


class ContactMessageSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContactMessage
        fields = ['id', 'name', 'email', 'phone', 'subject', 'message', 'status', 'created_at']
        read_only_fields = fields
