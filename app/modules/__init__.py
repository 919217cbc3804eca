"""Domain modules package."""

from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.booking import models as booking_models  # noqa: F401
from app.modules.disputes import models as disputes_models  # noqa: F401
from app.modules.identity import models as identity_models  # noqa: F401
from app.modules.notifications import models as notifications_models  # noqa: F401
from app.modules.professionals import models as professionals_models  # noqa: F401
