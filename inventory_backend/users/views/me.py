# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import effective_capabilities_for
from tenants.mixins import TenantScopedMixin
from users.models import User

# ---------------------------
# SERIALIZERS
# ---------------------------


class MeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    role = serializers.CharField()
    company_id = serializers.UUIDField(allow_null=True)
    company_name = serializers.CharField(allow_null=True)
    capabilities = serializers.ListField(child=serializers.CharField())


class MemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role"]


# ---------------------------
# VIEWS
# ---------------------------


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(
        tags=["auth"],
        responses={200: MeSerializer},
        description="Get current authenticated user profile",
    )
    def get(self, request):
        user = request.user
        company = getattr(user, "company", None)

        return Response(
            {
                "id": user.id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role": user.role,
                "company_id": getattr(company, "id", None),
                "company_name": getattr(company, "name", None),
                "capabilities": sorted(effective_capabilities_for(user)),
            }
        )


@extend_schema(tags=["auth"], description="Active members of the caller's company (approver pickers).")
class CompanyMembersView(TenantScopedMixin, ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MemberSerializer

    def get_queryset(self):
        return User.objects.filter(company=self.company, is_active=True).order_by("email")
