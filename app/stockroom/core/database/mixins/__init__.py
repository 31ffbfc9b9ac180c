from .created import CreatedDateTimeMixin  # noqa: F401
from .id import UUIDMixin  # noqa: F401
from .timestamp import TimestampMixin  # noqa: F401
from .updated import UpdatedDateTimeMixin  # noqa: F401
from .versioned import VersionedMixin  # noqa: F401
