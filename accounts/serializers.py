from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenObtainSerializer

from .models import AdminSession, User
from .sessions import is_session_active


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):

    def validate(self, attrs):
        # Authenticate only; the token pair is issued below so it can carry
        # the session id.
        data = TokenObtainSerializer.validate(self, attrs)

        if self.user.role not in ("ADMIN", "STAFF"):
            raise serializers.ValidationError("Account has no dashboard access")

        session = AdminSession.open(self.user)

        refresh = self.get_token(self.user)
        refresh["sid"] = str(session.id)
        refresh["role"] = self.user.role

        data["refresh"] = str(refresh)
        data["access"] = str(refresh.access_token)
        data["id"] = str(self.user.id)
        data["username"] = self.user.username
        data["role"] = self.user.role
        data["session_id"] = str(session.id)
        data["session_expires_at"] = session.expires_at
        return data


class AdminSessionSerializer(serializers.ModelSerializer):

    username = serializers.CharField(source="user.username", read_only=True)
    is_active = serializers.SerializerMethodField()

    class Meta:
        model = AdminSession
        fields = [
            "id",
            "username",
            "issued_at",
            "expires_at",
            "revoked_at",
            "is_active",
        ]

    def get_is_active(self, obj):
        return is_session_active(obj)


class MeProfileSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "first_name",
            "last_name",
            "email",
            "phone",
            "role",
        ]
        read_only_fields = ["id", "username", "role"]
