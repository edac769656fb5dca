"""
planning
--------

Setup and operator planning engines, leaves first:

- `catalog`: Per-region setup inventory and operator roster.
- `capacity`: Session capacity from the selected training modules.
- `availability`: Bookable setups per (date, region).
- `staffing`: The confirmation gate.
- `booking`: Session request / confirm / cancel lifecycle.
- `marketplace`: Operator applications (apply / accept / reject).
- `projection`: In-memory read model fed by change events.
- `matching`: Candidate operator scoring.
- `risk`: Staffing risk and operator overload.
- `container`: Wires all of the above around one repository.
"""
from . import (
    availability,
    booking,
    capacity,
    catalog,
    container,
    marketplace,
    matching,
    projection,
    risk,
    staffing,
)
