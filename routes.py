# routes.py
from fastapi import FastAPI
from controller.job_controller import job_router
from controller.meta_controller import meta_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(job_router)
    app.include_router(meta_router)
