"""
Support App Views - Contact form
"""

from rest_framework import status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from logistics.store import get_store_client
from .serializers import ContactMessageSerializer
from .services import ContactService


class ContactMessageCreateView(APIView):
    """POST /api/contact/ - public contact form."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        message = ContactService(get_store_client()).submit_contact_message(request.data)

        return Response({
            'success': True,
            'message': "Thank you for contacting us! We'll get back to you soon.",
            'contact': ContactMessageSerializer(message).data,
        }, status=status.HTTP_201_CREATED)
