"""Infrastructure services: implementations of application service ports."""

from app.infrastructure.services.notification_dispatch_service import (
    HttpNotificationDispatchService,
    LogOnlyNotificationDispatchService,
)
from app.infrastructure.services.room_provisioning_service import (
    SqlRoomProvisioningService,
)

__all__ = [
    "HttpNotificationDispatchService",
    "LogOnlyNotificationDispatchService",
    "SqlRoomProvisioningService",
]
