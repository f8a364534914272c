from django.conf import settings
from rest_framework.exceptions import ValidationError


def validate_upload(f, field: str = 'image'):
    """Reject files over ``UPLOAD_MAX_MB`` or outside ``ALLOWED_UPLOAD_TYPES``."""
    if f is None:
        raise ValidationError({field: 'file is required'})
    size_mb = (f.size or 0) / (1024*1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise ValidationError({field: 'file too large'})
    ctype = getattr(f, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise ValidationError({field: 'unsupported file type'})
    return f
