from django.contrib import admin

from .models import BlockRecord, UploadedFile


@admin.register(UploadedFile)
class UploadedFileAdmin(admin.ModelAdmin):
    list_display = ('id', 'original_name', 'status', 'created_at', 'updated_at')
    list_filter = ('status',)
    search_fields = ('original_name', 'stored_file_name')


@admin.register(BlockRecord)
class BlockRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'layer', 'file')
    search_fields = ('name',)
    list_select_related = ('file',)
