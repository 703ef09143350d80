# drawings/views.py

from rest_framework import status
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    BlockListQuerySerializer,
    BlockRecordSerializer,
    BlockSearchQuerySerializer,
    FileStatusSerializer,
    FileUploadSerializer,
    UploadedFileSerializer,
)
from .services import DrawingService


class FileUploadAPIView(APIView):
    parser_classes = [MultiPartParser]

    def post(self, request):
        serializer = FileUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = DrawingService()
        record = service.accept_upload(file_obj=serializer.validated_data['file'])
        # Ingestion runs in the background; the client polls the status endpoint.
        return Response(
            {
                "message": "File upload accepted, processing started.",
                "file": UploadedFileSerializer(record).data,
            },
            status=status.HTTP_202_ACCEPTED,
        )


class FileListAPIView(APIView):
    def get(self, request):
        files = DrawingService().list_files()
        return Response(UploadedFileSerializer(files, many=True).data)


class FileStatusAPIView(APIView):
    def get(self, request, pk):
        file_record = DrawingService().get_file(pk)
        return Response(FileStatusSerializer(file_record).data)


class BlockListAPIView(APIView):
    def get(self, request):
        params = BlockListQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        block_page = DrawingService().list_blocks(**params.validated_data)
        return Response({
            "total": block_page.total,
            "page": block_page.page,
            "limit": block_page.limit,
            "total_pages": block_page.total_pages,
            "data": BlockRecordSerializer(block_page.results, many=True).data,
        })


class BlockSearchAPIView(APIView):
    def get(self, request):
        params = BlockSearchQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        blocks = DrawingService().search_blocks(
            query=params.validated_data['q'],
            file_id=params.validated_data.get('file_id'),
        )
        return Response(BlockRecordSerializer(blocks, many=True).data)


class BlockDetailAPIView(APIView):
    def get(self, request, pk):
        block = DrawingService().get_block(pk)
        return Response(BlockRecordSerializer(block).data)
