"""Firestore collection and field names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically on
first write. The *Rank fields exist only so the server can order by priority
and status; they are derived from priority/status on every write.
"""

COLLECTION_TASKS = "tasks"

FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_STATUS = "status"
FIELD_STATUS_RANK = "statusRank"
FIELD_PRIORITY = "priority"
FIELD_PRIORITY_RANK = "priorityRank"
FIELD_DUE_DATE = "dueDate"
FIELD_ASSIGNED_TO = "assignedTo"
FIELD_CREATED_BY = "createdBy"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"
FIELD_VERSION = "version"
