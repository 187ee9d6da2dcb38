"""Data access for the users collection"""
import re
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from barsocial.db.connection import get_database
from barsocial.errors import NotFoundError, ErrorMessages

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

# Never sent back to clients
PUBLIC_PROJECTION = {"_id": 0, "password_hash": 0}


def users_collection():
    return get_database().users


def get_user(user_id: str) -> Dict[str, Any]:
    """Get a user by id, raising NotFoundError when it does not exist"""
    user = users_collection().find_one({"id": user_id}, PUBLIC_PROJECTION)
    if not user:
        raise NotFoundError(f"{ErrorMessages.USER_NOT_FOUND}: {user_id}")
    return user


def list_users(limit: int = DEFAULT_LIMIT, skip: int = 0) -> List[Dict[str, Any]]:
    """Page through users in insertion order"""
    cursor = users_collection().find({}, PUBLIC_PROJECTION).sort("_id", ASCENDING).skip(skip).limit(limit)
    return list(cursor)


def search_users(keyword: Optional[str]) -> List[Dict[str, Any]]:
    """Case-insensitive substring search on username"""
    if not keyword:
        return []
    search_filter = {"username": {"$regex": re.escape(keyword), "$options": "i"}}
    return list(users_collection().find(search_filter, PUBLIC_PROJECTION).sort("_id", ASCENDING))


def create_user(username: str, email: str, password_hash: str) -> Dict[str, Any]:
    user_id = str(ObjectId())
    new_user = {
        "id": user_id,
        "username": username,
        "email": email,
        "password_hash": password_hash,
        "favTeams": [],
        "following": [],
        "followers": [],
        "followingBars": [],
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    users_collection().insert_one(new_user)
    logger.info(f"Created user {user_id} ({username})")
    return get_user(user_id)


def update_user(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Set the given fields on a user and return the updated document"""
    if not fields:
        return get_user(user_id)
    updated = users_collection().find_one_and_update(
        {"id": user_id},
        {"$set": fields},
        projection=PUBLIC_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFoundError(f"{ErrorMessages.USER_NOT_FOUND}: {user_id}")
    return updated


def delete_user(user_id: str) -> Dict[str, Any]:
    """Delete a user and return the deleted document"""
    deleted = users_collection().find_one_and_delete({"id": user_id}, projection=PUBLIC_PROJECTION)
    if not deleted:
        raise NotFoundError(f"{ErrorMessages.USER_NOT_FOUND}: {user_id}")
    return deleted


def _find_by_ids(collection, ids: List[str]) -> List[Dict[str, Any]]:
    if not ids:
        return []
    return list(collection.find({"id": {"$in": ids}}, PUBLIC_PROJECTION).sort("_id", ASCENDING))


def following_users(user_id: str) -> List[Dict[str, Any]]:
    """Users followed by the given user"""
    user = get_user(user_id)
    return _find_by_ids(users_collection(), user.get("following", []))


def followers_users(user_id: str) -> List[Dict[str, Any]]:
    """Users following the given user"""
    user = get_user(user_id)
    return _find_by_ids(users_collection(), user.get("followers", []))


def following_bars(user_id: str) -> List[Dict[str, Any]]:
    """Bars followed by the given user"""
    user = get_user(user_id)
    return _find_by_ids(get_database().bars, user.get("followingBars", []))
