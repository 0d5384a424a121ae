from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from schemas.cause import CauseStatus
from services.cause_service import CauseService

router = APIRouter()


def render(request, template, **context):
    return request.app.state.templates.TemplateResponse(
        request,
        template,
        context
    )


# ---------- main ----------
@router.get("/", response_class=HTMLResponse)
async def home(request: Request, db: AsyncSession = Depends(get_db)):
    causes = await CauseService(db).list_causes(status=CauseStatus.APPROVED)
    return render(request, "index.html", causes=causes)


# ---------- auth ----------
@router.get("/login", response_class=HTMLResponse)
async def login(request: Request):
    return render(request, "auth/login.html")


# ---------- dashboard ----------
@router.get("/dashboard", response_class=HTMLResponse)
async def admin_dashboard(request: Request):
    return render(request, "dashboard/admin.html")


@router.get("/dashboard/donor", response_class=HTMLResponse)
async def donor_dashboard(request: Request):
    return render(request, "dashboard/donor.html")
