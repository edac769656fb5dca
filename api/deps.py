from fastapi import Request
from fastapi.responses import JSONResponse

from exceptions.custom_errors import CUSTOM_ERRORS
from planning.container import PlanningServices


def get_services(request: Request) -> PlanningServices:
    return request.app.state.services


def respond(result: dict):
    """Pass successes through; map failures to the status of their error code."""
    if result.get("success", False):
        return result
    return JSONResponse(status_code=CUSTOM_ERRORS.get(result.get("error"), 400), content=result)
