from __future__ import annotations

from fastapi import Request

from school_service.service import SchoolService


def get_school_service(request: Request) -> SchoolService:
    return request.app.state.school_service
