# users/urls.py

from django.urls import path

from .views import CompanyMembersView, MeView

app_name = "users"

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("members/", CompanyMembersView.as_view(), name="members"),
]
