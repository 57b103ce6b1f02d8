from .registrations import (
    MyRegistrationView,
    RegistrationStatusView,
    AdminRegistrationListView,
    AdminCheckInView,
)
from .schedule import (
    ScheduleListView,
    AdminScheduleViewSet,
)
