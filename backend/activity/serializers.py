from rest_framework import serializers

from .models import ActivityLog


class ActivityLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = ActivityLog
        fields = [
            'id',
            'action',
            'description',
            'entity_type',
            'entity_id',
            'user', 'username',
            'created_at',
        ]
        read_only_fields = fields
        select_related_fields = ['user']
