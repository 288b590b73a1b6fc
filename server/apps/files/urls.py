"""URL configuration of the files API."""

from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('me/', views.current_user, name='me'),
    path('auth/login/', views.login, name='login'),
    path('auth/logout/', views.logout, name='logout'),
    path('items/', views.list_items, name='items'),
    path('files/', views.register_file, name='register_file'),
    path('files/upload-grant/', views.upload_grant, name='upload_grant'),
    path('files/<uuid:file_id>/', views.delete_file, name='delete_file'),
    path('folders/', views.create_folder, name='create_folder'),
    path('folders/<uuid:folder_id>/', views.delete_folder, name='delete_folder'),
]
