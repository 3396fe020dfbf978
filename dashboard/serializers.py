from rest_framework import serializers

from accounts.models import User


class DashboardUserSerializer(serializers.ModelSerializer):
    """Row of the dashboard user table"""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'language', 'avatar_url', 'email_verified_at', 'created_at']
        read_only_fields = fields
