"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    ICareTeamStore,
    IProfileStore,
    IRegistrationTaskStore,
    ISubjectLeaseStore,
)
from app.application.interfaces.services import (
    INotificationDispatchService,
    IRoomProvisioningService,
    ITaskHandler,
)

__all__ = [
    "ICareTeamStore",
    "INotificationDispatchService",
    "IProfileStore",
    "IRegistrationTaskStore",
    "IRoomProvisioningService",
    "ISubjectLeaseStore",
    "ITaskHandler",
]
