# Namespace for pipeline steps
from .match_contact import MatchContact  # noqa: F401
from .apply_merge import ApplyMergePolicy  # noqa: F401
from .record_activity import RecordActivity  # noqa: F401
