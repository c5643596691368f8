"""Dashboard page and the JSON endpoints behind it."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from src.core.config import constants
from src.domain.task import TaskView
from src.interface.auth_router import (
    find_dashboard_session,
    generate_csrf_token,
    get_dashboard_session,
    set_csrf_cookie,
)
from src.models.service_models import (
    AddTaskRequest,
    DashboardView,
    DraftUpdateRequest,
    NotificationList,
    SelectTemplateRequest,
    TaskDraftRequest,
)
from src.services.dashboard_service import DashboardSession


logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])
api_router = APIRouter(prefix="/api", tags=["dashboard-api"])

templates = Jinja2Templates(directory=str(constants.TEMPLATES_DIR))


@router.get("/dashboard")
async def get_dashboard_page(request: Request) -> Response:
    """Render the dashboard shell, or redirect to sign-in without a live session."""
    session = find_dashboard_session(request)
    if session is None:
        return RedirectResponse(url="/auth/login", status_code=status.HTTP_303_SEE_OTHER)

    csrf_token = generate_csrf_token()
    response = templates.TemplateResponse(
        request,
        name="dashboard.html",
        context={
            "view": session.view(),
            "notifications": session.notifications.drain(),
            "csrf_token": csrf_token,
        },
    )
    set_csrf_cookie(response, csrf_token)
    return response


@api_router.get("/dashboard", response_model=DashboardView)
async def get_dashboard(session: DashboardSession = Depends(get_dashboard_session)) -> DashboardView:
    return session.view()


@api_router.post("/tasks/reload", response_model=DashboardView)
async def reload_tasks(session: DashboardSession = Depends(get_dashboard_session)) -> DashboardView:
    await session.tasks.load(session.auth.user)
    return session.view()


@api_router.put("/tasks/draft", response_model=DashboardView)
async def update_task_draft(
    payload: TaskDraftRequest,
    session: DashboardSession = Depends(get_dashboard_session),
) -> DashboardView:
    """Keep the pending task input so a later add without a title uses it."""
    session.tasks.draft_title = payload.title
    return session.view()


@api_router.post("/tasks", response_model=TaskView | None)
async def add_task(
    payload: AddTaskRequest,
    session: DashboardSession = Depends(get_dashboard_session),
) -> TaskView | None:
    """Add a task from the given title or the pending input; blank titles are ignored and return null."""
    task = await session.tasks.add(payload.title)
    if task is None:
        return None
    return next((view for view in session.tasks.task_views() if view.id == task.id), None)


@api_router.post("/tasks/{task_id}/toggle", response_model=TaskView | None)
async def toggle_task(task_id: str, session: DashboardSession = Depends(get_dashboard_session)) -> TaskView | None:
    """Toggle completion; returns the updated task, or null when nothing changed."""
    task = await session.tasks.toggle(task_id)
    if task is None:
        return None
    return next((view for view in session.tasks.task_views() if view.id == task.id), None)


@api_router.post("/email/template", response_model=DashboardView)
async def select_template(
    payload: SelectTemplateRequest,
    session: DashboardSession = Depends(get_dashboard_session),
) -> DashboardView:
    session.composer.select_template(payload.template_id)
    return session.view()


@api_router.put("/email/draft", response_model=DashboardView)
async def update_draft(
    payload: DraftUpdateRequest,
    session: DashboardSession = Depends(get_dashboard_session),
) -> DashboardView:
    """Update the fields present in the payload; a template is applied before explicit edits."""
    fields = payload.model_fields_set
    if "template_id" in fields:
        session.composer.select_template(payload.template_id)
    if "group_id" in fields:
        session.composer.select_group(payload.group_id)
    if "subject" in fields:
        session.composer.set_subject(payload.subject or "")
    if "body" in fields:
        session.composer.set_body(payload.body or "")
    return session.view()


@api_router.post("/email/send")
async def send_email(
    background_tasks: BackgroundTasks,
    session: DashboardSession = Depends(get_dashboard_session),
) -> JSONResponse:
    """Start the simulated send; it completes in the background."""
    if session.composer.is_sending:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An email is already being sent")

    if not session.composer.start_send():
        notifications = [n.model_dump(mode="json") for n in session.notifications.drain()]
        return JSONResponse(
            status_code=constants.HTTP_UNPROCESSABLE_ENTITY,
            content={"detail": "Missing Information", "notifications": notifications},
        )

    background_tasks.add_task(session.composer.finish_send)
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"state": session.composer.state})


@api_router.get("/notifications", response_model=NotificationList)
async def drain_notifications(session: DashboardSession = Depends(get_dashboard_session)) -> NotificationList:
    return NotificationList(notifications=session.notifications.drain())
