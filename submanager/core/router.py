# submanager/core/router.py
"""
Module for registering routes in the FastAPI application.
"""

from fastapi import FastAPI

from submanager.accounts.router import router as account_router
from submanager.activity.router import router as activity_router
from submanager.auth.router import router as auth_router
from submanager.counters.router import router as counter_router
from submanager.customers.router import router as customer_router
from submanager.expenses.router import category_router as expense_category_router
from submanager.expenses.router import router as expense_router
from submanager.insights.router import router as insight_router
from submanager.logging.router import router as log_router
from submanager.packages.router import router as package_router
from submanager.users.router import router as user_router


def register_routes(app: FastAPI) -> None:
    """
    Registers all the routes for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    app.include_router(auth_router, prefix="/api")
    app.include_router(account_router, prefix="/api")
    app.include_router(package_router, prefix="/api")
    app.include_router(customer_router, prefix="/api")
    app.include_router(expense_router, prefix="/api")
    app.include_router(expense_category_router, prefix="/api")
    app.include_router(user_router, prefix="/api")
    app.include_router(activity_router, prefix="/api")
    app.include_router(insight_router, prefix="/api")
    app.include_router(counter_router, prefix="/api")
    app.include_router(log_router, prefix="/api")
