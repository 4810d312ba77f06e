from drf_spectacular.utils import inline_serializer
from rest_framework import serializers


class ProblemSerializer(serializers.Serializer):
    title = serializers.CharField()
    status = serializers.IntegerField()
    detail = serializers.CharField()
    instance = serializers.CharField(allow_null=True)
    code = serializers.CharField()
    traceId = serializers.CharField(allow_null=True)
    errors = serializers.ListField(child=serializers.CharField(), required=False)


def envelope(
    data_field: serializers.Field,
    name: str,
) -> serializers.Serializer:
    """Create an inline serializer describing the ``{success, message, data, errors}`` envelope."""
    return inline_serializer(
        name=f"{name}Envelope",
        fields={
            "success": serializers.BooleanField(),
            "message": serializers.CharField(),
            "data": data_field,
            "errors": serializers.ListField(
                child=serializers.CharField(), allow_null=True
            ),
        },
    )
