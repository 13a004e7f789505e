"""
Server clock as seen by clients
"""
from fastapi import APIRouter

from ....utils.timezone import get_timezone_info

router = APIRouter()


@router.get("/info")
async def get_server_time_info():
    """Server time in the display timezone; violation timestamps use this clock"""
    return get_timezone_info()
