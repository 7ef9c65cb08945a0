from fastapi import APIRouter
from app.routers import applications, categories, companies, jobs, skills, users

# Centralized API router hub: main.py only imports this single router.
api_router = APIRouter()

api_router.include_router(jobs.router)
api_router.include_router(companies.router)
api_router.include_router(users.router)
api_router.include_router(applications.router)
api_router.include_router(categories.router)
api_router.include_router(skills.router)
