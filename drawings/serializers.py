from rest_framework import serializers
from .models import BlockRecord, UploadedFile


class UploadedFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadedFile
        fields = ['id', 'original_name', 'stored_file_name', 'status', 'created_at', 'updated_at']
        read_only_fields = fields


class FileStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadedFile
        fields = ['id', 'status', 'original_name']
        read_only_fields = fields


class FileUploadSerializer(serializers.Serializer):
    file = serializers.FileField(write_only=True)


class BlockFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadedFile
        fields = ['id', 'original_name']


class BlockRecordSerializer(serializers.ModelSerializer):
    file_id = serializers.IntegerField(read_only=True)
    file = BlockFileSerializer(read_only=True)

    class Meta:
        model = BlockRecord
        fields = ['id', 'file_id', 'name', 'layer', 'coordinates', 'created_at', 'updated_at', 'file']
        read_only_fields = ['id', 'name', 'layer', 'coordinates', 'created_at', 'updated_at']


class BlockListQuerySerializer(serializers.Serializer):
    file_id = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=10, min_value=1)


class BlockSearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(trim_whitespace=True, allow_blank=False)
    file_id = serializers.IntegerField(required=False, min_value=1)
