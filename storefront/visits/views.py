from typing import Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from storefront.utils.rate_limit import optional_rate_limit
from storefront.visits import service as visits_service

# module storefront.visits.views
router = APIRouter(prefix="/api/v1/visits", tags=["Visits"])


class VisitIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: str = "/"
    referrer: Optional[str] = ""
    user_agent: Optional[str] = Field("", alias="userAgent")


@router.post("", status_code=202, dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def track_visit(body: VisitIn, request: Request):
    """Toujours 202: l'échec de la notification ne concerne pas le visiteur."""
    result = visits_service.track_visit(
        page=body.page,
        referrer=body.referrer or "",
        user_agent=body.user_agent or request.headers.get("user-agent", ""),
        country=request.headers.get("cf-ipcountry", ""),
    )
    return {"tracked": result.ok}
