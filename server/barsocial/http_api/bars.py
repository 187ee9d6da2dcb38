"""Bar handlers"""
from typing import Dict, Any, List
from pydantic import BaseModel, Field
from barsocial.db import bars as bars_db
from barsocial.db import relationships


class CreateBarRequest(BaseModel):
    name: str = Field(..., min_length=1)
    placeId: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

async def list_bars_handler(limit: int, skip: int) -> List[Dict[str, Any]]:
    return bars_db.list_bars(limit=limit, skip=skip)

async def search_bars_handler(keyword: str) -> List[Dict[str, Any]]:
    return bars_db.search_bars(keyword)

async def geo_search_handler(keyword: str, latitude: float, longitude: float, max_distance: float) -> List[Dict[str, Any]]:
    """Bars matching keyword within max_distance kilometers of (latitude, longitude)"""
    return bars_db.geolocation_search(keyword, latitude, longitude, max_distance)

async def get_bar_handler(bar: Dict[str, Any]) -> Dict[str, Any]:
    return bar

async def create_bar_handler(bar_data: CreateBarRequest) -> Dict[str, Any]:
    return bars_db.create_bar(
        name=bar_data.name,
        place_id=bar_data.placeId,
        latitude=bar_data.latitude,
        longitude=bar_data.longitude,
    )

async def delete_bar_handler(bar: Dict[str, Any]) -> Dict[str, Any]:
    """Delete the bar, then drop it from every user following it"""
    deleted = bars_db.delete_bar(bar["id"])
    relationships.remove_bar_references(bar["id"])
    return deleted
