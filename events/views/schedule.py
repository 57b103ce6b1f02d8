from rest_framework import generics, viewsets
from rest_framework.permissions import IsAuthenticated

from core.permissions import IsHackathonAdmin
from events.models import ScheduleItem
from events.serializers import ScheduleItemSerializer


class ScheduleListView(generics.ListAPIView):
    """GET /api/events/schedule/ -> items ordered by start time."""
    permission_classes = [IsAuthenticated]
    serializer_class = ScheduleItemSerializer
    queryset = ScheduleItem.objects.all().order_by("start_time")


class AdminScheduleViewSet(viewsets.ModelViewSet):
    permission_classes = [IsHackathonAdmin]
    serializer_class = ScheduleItemSerializer
    queryset = ScheduleItem.objects.all().order_by("start_time")
