from django.urls import include, path

urlpatterns = [
    path("api/", include("reservations.api.urls")),
    path("api/resources/", include("resources.api.urls")),
]
