from fastapi import APIRouter

from worklog.api.v1 import activities, auth, projects, tags, timesheets, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(activities.router, prefix="/activities", tags=["activities"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(timesheets.router, prefix="/timesheets", tags=["timesheets"])
