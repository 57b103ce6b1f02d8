# users/views.py - organiser user management

from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from core.permissions import IsHackathonAdmin
from .serializers import AdminUserSerializer
from .services import delete_user_completely

User = get_user_model()


class AdminUserViewSet(mixins.ListModelMixin,
                       mixins.RetrieveModelMixin,
                       mixins.DestroyModelMixin,
                       viewsets.GenericViewSet):
    """
    GET    /api/users/admin/?q=alice&admin=true
    GET    /api/users/admin/{id}/
    DELETE /api/users/admin/{id}/
    """
    permission_classes = [IsHackathonAdmin]
    serializer_class = AdminUserSerializer

    def get_queryset(self):
        qs = User.objects.select_related("registration").order_by("-date_joined")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(email__icontains=q) | Q(full_name__icontains=q))

        admin_only = self.request.query_params.get("admin")
        if admin_only is not None:
            flag = admin_only.lower() in ("1", "true", "yes")
            admin_q = Q(is_admin=True) | Q(is_superuser=True)
            qs = qs.filter(admin_q) if flag else qs.exclude(admin_q)
        return qs

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise ValidationError({"detail": "You cannot delete your own account."})

        method = delete_user_completely(user)
        return Response({"deleted": True, "method": method}, status=status.HTTP_200_OK)
