from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from pipeline_app.models.schemas import AppInfo
from pipeline_app.services.dependencies import get_app_info

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
router = APIRouter(tags=["pages"])


def _render(request: Request, name: str, app_info: AppInfo) -> HTMLResponse:
    return templates.TemplateResponse(request, name, {"app_info": app_info})


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, app_info: AppInfo = Depends(get_app_info)) -> HTMLResponse:
    return _render(request, "index.html", app_info)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, app_info: AppInfo = Depends(get_app_info)) -> HTMLResponse:
    return _render(request, "login.html", app_info)


@router.get("/support", response_class=HTMLResponse)
async def support_page(request: Request, app_info: AppInfo = Depends(get_app_info)) -> HTMLResponse:
    return _render(request, "support.html", app_info)
