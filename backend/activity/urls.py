from django.urls import path

from .views import ActivityLogViewSet

app_name = "activity"

urlpatterns = [
    path("", ActivityLogViewSet.as_view({"get": "list"}), name="activity-list"),
    path("actions/", ActivityLogViewSet.as_view({"get": "actions"}), name="activity-actions"),
    path("<uuid:pk>/", ActivityLogViewSet.as_view({"get": "retrieve"}), name="activity-detail"),
]
