from django.urls import path

from .views import resource_detail_view, resource_list_view

urlpatterns = [
    path("", resource_list_view),
    path("<int:resource_id>/", resource_detail_view),
]
