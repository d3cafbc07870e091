from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Self-service registration. New accounts always start with the `user` role."""
    password1 = serializers.CharField(
        write_only=True, required=True, validators=[validate_password]
    )
    password2 = serializers.CharField(
        write_only=True, required=True, label="Confirm Password",
    )

    class Meta:
        model = User
        fields = ("id", "username", "email", "full_name", "department", "position", "password1", "password2")
        read_only_fields = ("id",)
        extra_kwargs = {
            "email": {"required": True},
            "username": {"required": False},
            "full_name": {"required": True},
        }

    def validate(self, attrs):
        if attrs["password1"] != attrs["password2"]:
            raise serializers.ValidationError(
                {"password": "Password fields didn't match."}
            )
        return attrs

    def create(self, validated_data):
        validated_data.pop("password2")
        password = validated_data.pop("password1")
        return User.objects.create_user(password=password, **validated_data)


class UserDetailsSerializer(serializers.ModelSerializer):
    """
    Serializer for the custom user model for user detail endpoints.
    """
    class Meta:
        model = User
        fields = ("id", "username", "email", "full_name", "role", "department", "position",
                  "avatar_url", "is_active", "date_joined")
        read_only_fields = ("id", "email", "username", "role", "is_active", "date_joined")


class UserAdminSerializer(UserDetailsSerializer):
    """Admins may change role and activation of other accounts."""
    class Meta(UserDetailsSerializer.Meta):
        read_only_fields = ("id", "email", "username", "date_joined")
