"""Store-assigned task ids.

Both task stores mint ids here, so the in-memory and Firestore backends hand
out the same shape: a lowercase CUID2 that is safe in URLs and valid as a
Firestore document id.
"""

from cuid2 import Cuid

TASK_ID_LENGTH = 24

_task_ids = Cuid(length=TASK_ID_LENGTH)


def generate_task_id() -> str:
    """Return a new collision-resistant task id."""
    return _task_ids.generate()
