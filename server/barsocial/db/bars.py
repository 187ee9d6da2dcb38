"""Data access for the bars collection"""
import re
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from bson import ObjectId
from pymongo import ASCENDING
from barsocial.db.connection import get_database
from barsocial.errors import NotFoundError, ErrorMessages

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
EARTH_RADIUS_KM = 6378.1

PUBLIC_PROJECTION = {"_id": 0}


def bars_collection():
    return get_database().bars


def get_bar(bar_id: str) -> Dict[str, Any]:
    """Get a bar by id, raising NotFoundError when it does not exist"""
    bar = bars_collection().find_one({"id": bar_id}, PUBLIC_PROJECTION)
    if not bar:
        raise NotFoundError(f"{ErrorMessages.BAR_NOT_FOUND}: {bar_id}")
    return bar


def list_bars(limit: int = DEFAULT_LIMIT, skip: int = 0) -> List[Dict[str, Any]]:
    """Page through bars in insertion order"""
    cursor = bars_collection().find({}, PUBLIC_PROJECTION).sort("_id", ASCENDING).skip(skip).limit(limit)
    return list(cursor)


def keyword_filter(keyword: Optional[str]) -> Dict[str, Any]:
    if not keyword:
        return {}
    return {"name": {"$regex": re.escape(keyword), "$options": "i"}}


def search_bars(keyword: Optional[str]) -> List[Dict[str, Any]]:
    """Case-insensitive substring search on the bar name"""
    if not keyword:
        return []
    return list(bars_collection().find(keyword_filter(keyword), PUBLIC_PROJECTION).sort("_id", ASCENDING))


def geolocation_filter(keyword: Optional[str], latitude: float, longitude: float, max_distance: float) -> Dict[str, Any]:
    """
    Build the filter for bars matching a keyword within max_distance kilometers of a point.

    $centerSphere takes its radius in radians, hence the division by the Earth radius.
    """
    search_filter = keyword_filter(keyword)
    search_filter["location"] = {
        "$geoWithin": {
            "$centerSphere": [[longitude, latitude], max_distance / EARTH_RADIUS_KM]
        }
    }
    return search_filter


def geolocation_search(keyword: Optional[str], latitude: float, longitude: float, max_distance: float) -> List[Dict[str, Any]]:
    """Both the keyword and the distance must match; no keyword means no results"""
    if not keyword:
        return []
    search_filter = geolocation_filter(keyword, latitude, longitude, max_distance)
    return list(bars_collection().find(search_filter, PUBLIC_PROJECTION))


def create_bar(name: str, place_id: str, latitude: float, longitude: float) -> Dict[str, Any]:
    bar_id = str(ObjectId())
    new_bar = {
        "id": bar_id,
        "name": name,
        "placeId": place_id,
        # GeoJSON order is [longitude, latitude]
        "location": {
            "type": "Point",
            "coordinates": [longitude, latitude]
        },
        "followers": [],
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    bars_collection().insert_one(new_bar)
    logger.info(f"Created bar {bar_id} ({name})")
    return get_bar(bar_id)


def delete_bar(bar_id: str) -> Dict[str, Any]:
    """Delete a bar and return the deleted document"""
    deleted = bars_collection().find_one_and_delete({"id": bar_id}, projection=PUBLIC_PROJECTION)
    if not deleted:
        raise NotFoundError(f"{ErrorMessages.BAR_NOT_FOUND}: {bar_id}")
    return deleted
