"""Mini README: FastAPI-powered interface for the GramChain ledger.

Structure:
    * create_application - application factory wiring routes and templates.
    * Ledger routes - role-filtered listings, allocations, project patches.
    * Attestation route - wallet-signed, pinned project creation.

Reads always go through the visibility filter for the ``role``/``name`` query
parameters and metrics are recomputed per request. Routes touching the
store are plain functions and run in the threadpool. Ledger errors map to
HTTP statuses: unknown ids 404, validation 400, stale revisions 409, attestation
dependencies missing 503, user rejection 403, provider failures 502.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Form, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from ..attestation import (
    AttestationAdapter,
    AttestationError,
    PinningClient,
    PinningNotConfiguredError,
    UserRejectedError,
    WalletNotInstalledError,
    create_attested_project,
    create_wallet_provider,
)
from ..configuration import get_settings
from ..ledger import (
    JsonFileRecordStore,
    LedgerMutator,
    Project,
    ProjectConflictError,
    RecordStore,
    Role,
    Viewer,
    summarise_dashboard,
    visible_projects,
    visible_transactions,
)
from ..ledger.visibility import can_allocate_funds, can_create_projects
from ..ledger.workflows import (
    allocate_funds,
    approve_milestone,
    create_planned_project,
    pay_milestone,
    submit_milestone,
)
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


def _viewer(role: str, name: str) -> Viewer:
    try:
        return Viewer(role=Role.from_str(role), name=name)
    except ValueError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error


def _project_payload(project: Project) -> Dict[str, Any]:
    payload = project.as_dict()
    payload["revision"] = project.revision_tag()
    return payload


def _attestation_status(error: AttestationError) -> int:
    if isinstance(error, (WalletNotInstalledError, PinningNotConfiguredError)):
        return 503
    if isinstance(error, UserRejectedError):
        return 403
    return 502


def create_application(
    store: Optional[RecordStore] = None,
    adapter: Optional[AttestationAdapter] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = get_settings()
    app = FastAPI(title="GramChain Ledger", version="0.1.0")
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

    mutator = LedgerMutator(store or JsonFileRecordStore(settings.ledger_directory))
    attestation = adapter or AttestationAdapter(
        create_wallet_provider(), PinningClient.from_settings()
    )

    @app.get("/", response_class=HTMLResponse)
    def dashboard(request: Request, role: str = "public", name: str = "") -> HTMLResponse:
        """Render the dashboard for the requested viewer."""

        viewer = _viewer(role, name)
        transactions, projects = mutator.store.load()
        shown_projects = visible_projects(projects, viewer)
        metrics = summarise_dashboard(transactions, shown_projects)
        LOGGER.debug(
            "Dashboard for %s -> funds: %.2f projects: %s pending: %s",
            viewer.role.value,
            metrics["total_funds"],
            len(shown_projects),
            metrics["pending_approvals"],
        )
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "viewer": viewer,
                "metrics": metrics,
                "projects": shown_projects,
                "transactions": visible_transactions(transactions, viewer),
                "can_create_projects": can_create_projects(viewer.role),
                "can_allocate_funds": can_allocate_funds(viewer.role),
            },
        )

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "OK", "environment": settings.environment})

    @app.get("/ledger/summary")
    def summary(role: str = "public", name: str = "") -> JSONResponse:
        """Headline totals; project counts follow the viewer's visibility."""

        viewer = _viewer(role, name)
        transactions, projects = mutator.store.load()
        return JSONResponse(summarise_dashboard(transactions, visible_projects(projects, viewer)))

    @app.get("/ledger/transactions")
    def list_transactions(role: str = "public", name: str = "") -> JSONResponse:
        viewer = _viewer(role, name)
        transactions = visible_transactions(mutator.list_transactions(), viewer)
        LOGGER.debug("Returning %s transactions for %s", len(transactions), viewer.role.value)
        return JSONResponse({"transactions": [item.as_dict() for item in transactions]})

    @app.post("/ledger/transactions")
    def add_transaction(
        sender: str = Form(...),
        recipient: str = Form(...),
        amount: float = Form(...),
        transaction_type: str = Form(...),
        description: str = Form(""),
        status: str = Form("pending"),
        project_id: Optional[str] = Form(None),
    ) -> JSONResponse:
        """Append a raw transaction to the ledger."""

        try:
            transaction = mutator.add_transaction(
                sender=sender,
                recipient=recipient,
                amount=amount,
                transaction_type=transaction_type,
                description=description,
                status=status,
                project_id=project_id,
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(transaction.as_dict(), status_code=201)

    @app.get("/ledger/projects")
    def list_projects(role: str = "public", name: str = "") -> JSONResponse:
        viewer = _viewer(role, name)
        projects = visible_projects(mutator.list_projects(), viewer)
        return JSONResponse({"projects": [_project_payload(project) for project in projects]})

    @app.post("/ledger/projects")
    def create_project(
        name: str = Form(...),
        total_budget: float = Form(...),
        description: str = Form(""),
        location: str = Form(""),
        contractor: Optional[str] = Form(None),
    ) -> JSONResponse:
        """Create a planning-stage project with default milestones."""

        try:
            project = create_planned_project(
                mutator,
                name=name,
                total_budget=total_budget,
                description=description,
                location=location,
                contractor=contractor,
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(_project_payload(project), status_code=201)

    @app.post("/ledger/projects/attested")
    async def create_project_with_attestation(request: Request) -> JSONResponse:
        """Create a project after a wallet signature and document upload."""

        form = await request.form()
        try:
            project = await run_in_threadpool(
                create_attested_project, dict(form), attestation, mutator
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        except AttestationError as error:
            raise HTTPException(status_code=_attestation_status(error), detail=str(error)) from error
        return JSONResponse(
            {
                "project": _project_payload(project),
                "state": attestation.state.value,
                "url": attestation.pinning.gateway_link(project.ipfs_hash or ""),
            },
            status_code=201,
        )

    @app.patch("/ledger/projects/{project_id}")
    def update_project(
        project_id: str,
        patch: Dict[str, Any] = Body(..., embed=True),
        expected_revision: Optional[str] = Body(None, embed=True),
    ) -> JSONResponse:
        """Shallow-merge a patch into a project, optionally checking its revision."""

        try:
            mutator.get_project(project_id)
            mutator.update_project(project_id, patch, expected_revision=expected_revision)
            project = mutator.get_project(project_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        except ProjectConflictError as error:
            raise HTTPException(status_code=409, detail=str(error)) from error
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(_project_payload(project))

    @app.post("/ledger/allocate")
    def allocate(
        role: str = Form(...),
        name: str = Form(...),
        recipient_type: str = Form(...),
        recipient: str = Form(""),
        amount: str = Form(""),
        description: str = Form(""),
        project_id: Optional[str] = Form(None),
    ) -> JSONResponse:
        """Record a completed allocation or payment on behalf of the viewer."""

        viewer = _viewer(role, name)
        if not can_allocate_funds(viewer.role):
            raise HTTPException(status_code=403, detail=f"Role '{viewer.role.value}' cannot allocate funds")
        try:
            transaction = allocate_funds(
                mutator,
                viewer,
                recipient_type=recipient_type,
                recipient=recipient,
                amount=amount,
                description=description,
                project_id=project_id,
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        LOGGER.info("Allocation %s recorded by %s", transaction.transaction_id, viewer.name)
        return JSONResponse(transaction.as_dict(), status_code=201)

    milestone_actions = {
        "submit": submit_milestone,
        "approve": approve_milestone,
        "pay": pay_milestone,
    }

    @app.post("/ledger/projects/{project_id}/milestones/{milestone_id}/{action}")
    def milestone_action(project_id: str, milestone_id: str, action: str) -> JSONResponse:
        """Advance a milestone to submitted, approved, or paid."""

        handler = milestone_actions.get(action)
        if handler is None:
            raise HTTPException(status_code=404, detail=f"Unknown milestone action '{action}'")
        try:
            handler(mutator, project_id, milestone_id)
            project = mutator.get_project(project_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return JSONResponse(_project_payload(project))

    @app.delete("/ledger")
    def clear_ledger() -> JSONResponse:
        mutator.clear_all()
        return JSONResponse({"cleared": True})

    return app
