from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from queueing.models import ActivityLog

User = get_user_model()

def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[Any]=None, detail: Optional[Dict[str, Any]]=None) -> ActivityLog:
    return ActivityLog.objects.create(
        staff=user if getattr(user, 'pk', None) else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        details=detail or {},
    )
