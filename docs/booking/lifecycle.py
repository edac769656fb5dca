create_booking_description = """
Request a session for a client. The session is created as
`pending_confirmation` with no setup assigned.

### Request Body

```json
{
    "clientId": "client-1",
    "regionId": "east",
    "date": "2025-01-10",
    "moduleIds": ["mod-a"],
    "requestedParticipants": 8
}
```

### Errors

- `VALIDATION_FAILED`: a required field is missing or malformed.
- `CAPACITY_EXCEEDED`: participants exceed the most restrictive module.
- `NO_AVAILABILITY`: no setup can be sold that day; up to 5
  `availableAlternatives` are returned.
"""

confirm_booking_description = """
Confirm a pending session and allocate the lowest free setup in its region.

The session must be staffed first: accepted operators must cover
`minOperators`. Availability is re-checked at call time.

### Errors

- `NOT_FOUND`, `INVALID_STATUS`
- `STAFFING_INVALID` with `reasons`
- `NO_SETUP_AVAILABLE` (retryable) with `availableAlternatives`
"""

cancel_booking_description = """
Cancel a session that is still `pending_confirmation`. The session record is
deleted. Confirmed sessions cannot be cancelled here (`INVALID_STATUS`).
"""

check_availability_description = """
Dry run of a booking request: checks module capacity and the date without
creating anything.
"""

booking_status_description = """
Current state of a booking, including the assigned setups.
"""

staffing_status_description = """
Staffing state of a session: required vs accepted operators, application
counts and whether the session could be confirmed now.
"""
