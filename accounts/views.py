import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .permissions import HasActiveSession, get_admin_session
from .serializers import (
    AdminSessionSerializer,
    CustomTokenObtainPairSerializer,
    MeProfileSerializer,
)
from .sessions import seconds_remaining

logger = logging.getLogger(__name__)


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class LogoutView(APIView):
    permission_classes = [HasActiveSession]

    def post(self, request):
        session = get_admin_session(request)
        session.revoke()
        logger.info("Session %s revoked for %s", session.id, request.user.username)
        return Response({"message": "Logged out"}, status=status.HTTP_200_OK)


class SessionView(APIView):
    permission_classes = [HasActiveSession]

    def get(self, request):
        session = get_admin_session(request)
        data = AdminSessionSerializer(session).data
        data["seconds_remaining"] = seconds_remaining(session)
        return Response(data, status=status.HTTP_200_OK)


class MeProfileView(APIView):
    permission_classes = [HasActiveSession]

    def get(self, request):
        serializer = MeProfileSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def patch(self, request):
        serializer = MeProfileSerializer(
            request.user,
            data=request.data,
            partial=True
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_200_OK)
