"""
Privacy app serializers.
"""

from rest_framework import serializers


class PolicyDecisionSerializer(serializers.Serializer):
    allowed = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)


class RateLimitStatusSerializer(serializers.Serializer):
    action = serializers.CharField()
    remaining = serializers.IntegerField()
    max_attempts = serializers.IntegerField()
    window_seconds = serializers.FloatField()
    cooldown_seconds = serializers.FloatField()
    allowed = serializers.BooleanField()
    retry_after = serializers.IntegerField(allow_null=True)
