from django.urls import path
from . import views

urlpatterns = [
    path('files/upload/', views.FileUploadAPIView.as_view(), name='file-upload'),
    path('files/', views.FileListAPIView.as_view(), name='file-list'),
    path('files/<int:pk>/status/', views.FileStatusAPIView.as_view(), name='file-status'),
    path('blocks/', views.BlockListAPIView.as_view(), name='block-list'),
    path('blocks/search/', views.BlockSearchAPIView.as_view(), name='block-search'),
    path('blocks/<int:pk>/', views.BlockDetailAPIView.as_view(), name='block-detail'),
]
