apply_description = """
Operator applies to a session.

The session must be `confirmed` and visible on the marketplace. A previously
rejected application is replaced by a new pending one.

### Request Body

```json
{ "operatorId": "op1" }
```

### Errors

- `NOT_FOUND`, `INVALID_SESSION_STATUS`, `SESSION_NOT_VISIBLE`
- `ALREADY_ACCEPTED`: the operator is already on the session.
- `ALREADY_APPLIED`: a pending application already exists.
"""

accept_description = """
Accept a pending application. The operator joins the session's accepted
operators.

### Errors

- `APPLICATION_NOT_FOUND`
- `INVALID_APPLICATION_STATUS`: the application is not pending.
"""

reject_description = """
Reject an application, optionally with a `reason`. An accepted operator is
removed from the session.
"""

open_sessions_description = """
Sessions of a region operators can apply to: confirmed, visible, and holding
at least one setup. Each row carries `openPositions` and application counts.
"""

operator_applications_description = """
All applications of an operator with their session details and a per-status
summary.
"""

session_details_description = """
Marketplace view of one session: accepted operators and applications grouped
by status.
"""
