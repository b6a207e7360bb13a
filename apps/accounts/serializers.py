from rest_framework import serializers


class IssuerLoginSerializer(serializers.Serializer):
    """Serializer for issuer login."""

    code = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    issuer_name = serializers.CharField(required=True, max_length=200)


class IssuerSerializer(serializers.Serializer):
    """Current issuer identity."""

    issuer_name = serializers.CharField()
