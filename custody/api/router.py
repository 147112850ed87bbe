from fastapi import APIRouter

from custody.api.audit import audit_router
from custody.api.ledger import employee_totals_router, ledger_reports_router
from custody.api.projects import memberships_router, projects_router
from custody.api.requests import cash_requests_router, expenses_router, requests_router
from custody.api.uploads import uploads_router
from custody.api.users import users_router

api_router = APIRouter()
api_router.include_router(users_router)
api_router.include_router(projects_router)
api_router.include_router(memberships_router)
api_router.include_router(cash_requests_router)
api_router.include_router(expenses_router)
api_router.include_router(requests_router)
api_router.include_router(employee_totals_router)
api_router.include_router(ledger_reports_router)
api_router.include_router(audit_router)
api_router.include_router(uploads_router)
