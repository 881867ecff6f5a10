"""Task ownership policy.

Learn: One rule, applied to every task query (list, get, update, delete,
stats): admins see everything, everyone else sees only rows they own.

A row hidden by the policy and a row that doesn't exist look identical to
the caller (both 404). Returning 403 would tell a non-admin that someone
else's task id is real.
"""

from sqlalchemy import Select

from taskboard.auth.dependencies import CurrentIdentity
from taskboard.db.models import Task


def scope_tasks(query: Select, identity: CurrentIdentity) -> Select:
    """Restrict a Task query to what `identity` may see."""
    if identity.is_admin:
        return query
    return query.where(Task.user_id == identity.user_id)
