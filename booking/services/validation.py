from ..core.exceptions import ValidationError
from ..core.messages import get_message
from ..models import column_max_length


def ensure_max_length(value: str, model, column_name: str, label_key: str) -> str:
    """Reject text longer than the column that will store it."""
    limit = column_max_length(model, column_name)
    if limit is not None and len(value) > limit:
        raise ValidationError(
            get_message("too_long", field=get_message(label_key), max_length=limit)
        )
    return value
