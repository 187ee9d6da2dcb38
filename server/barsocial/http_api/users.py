import bcrypt
import logging
from typing import Dict, Any, List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field
from barsocial.db import users as users_db
from barsocial.db import relationships
from barsocial.errors import APIError, ErrorMessages
from barsocial.teams.team_service import get_team_service

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"

Operation = Literal["add", "remove"]

# Pydantic models for request bodies
class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)

class UpdateUserRequest(BaseModel):
    username: Optional[str] = Field(None, min_length=1)

class FavTeamRequest(BaseModel):
    operation: Operation
    favTeamId: str = Field(..., min_length=1)

class FollowUserRequest(BaseModel):
    operation: Operation
    user: str = Field(..., min_length=1)

class FollowBarRequest(BaseModel):
    operation: Operation
    barId: str = Field(..., min_length=1)

def hash_password(password: str) -> str:
    """Hash password with bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

# API Endpoints
async def list_users_handler(limit: int, skip: int) -> List[Dict[str, Any]]:
    return users_db.list_users(limit=limit, skip=skip)

async def search_users_handler(keyword: str) -> List[Dict[str, Any]]:
    return users_db.search_users(keyword)

async def get_user_handler(user: Dict[str, Any]) -> Dict[str, Any]:
    """Return the user with favTeams expanded into team objects (not persisted)"""
    teams = await get_team_service().populate_teams(user.get("favTeams", []))
    return {**user, "favTeams": teams}

async def create_user_handler(user_data: CreateUserRequest) -> Dict[str, Any]:
    return users_db.create_user(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
    )

async def update_user_handler(user: Dict[str, Any], update_data: UpdateUserRequest) -> Dict[str, Any]:
    """Apply only the fields present in the request; an empty body leaves the user unchanged"""
    fields = update_data.model_dump(exclude_none=True)
    return users_db.update_user(user["id"], fields)

async def delete_user_handler(user: Dict[str, Any]) -> Dict[str, Any]:
    """Delete the user, then drop its id from every back-reference"""
    deleted = users_db.delete_user(user["id"])
    relationships.remove_user_references(user["id"])
    return deleted

async def update_fav_teams_handler(user: Dict[str, Any], fav_team_data: FavTeamRequest) -> Dict[str, Any]:
    """Add or remove a team from the user's favorite teams"""
    team_id = fav_team_data.favTeamId
    if fav_team_data.operation == ADD:
        action, message = relationships.add_fav_team, ErrorMessages.ERROR_ON_FOLLOW_TEAM
    else:
        action, message = relationships.remove_fav_team, ErrorMessages.ERROR_ON_UNFOLLOW_TEAM

    try:
        return action(user["id"], team_id)
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Favorite team {fav_team_data.operation} failed for user {user['id']}: {e}")
        raise APIError(message, 400, True)

async def update_following_handler(user: Dict[str, Any], follow_data: FollowUserRequest) -> Dict[str, Any]:
    """Follow or unfollow another user, keeping both users' arrays in sync"""
    target_id = follow_data.user
    if follow_data.operation == ADD:
        action, message = relationships.follow_user, ErrorMessages.ERROR_ON_FOLLOW_USER
    else:
        action, message = relationships.unfollow_user, ErrorMessages.ERROR_ON_UNFOLLOW_USER

    try:
        return action(user, target_id)
    except APIError:
        raise
    except Exception as e:
        logger.error(f"{follow_data.operation} following {target_id} failed for user {user['id']}: {e}")
        raise APIError(message, 400, True)

async def update_following_bars_handler(user: Dict[str, Any], follow_data: FollowBarRequest) -> Dict[str, Any]:
    """Follow or unfollow a bar, keeping user.followingBars and bar.followers in sync"""
    bar_id = follow_data.barId
    if follow_data.operation == ADD:
        action, message = relationships.follow_bar, ErrorMessages.ERROR_ON_FOLLOW_BAR
    else:
        action, message = relationships.unfollow_bar, ErrorMessages.ERROR_ON_UNFOLLOW_BAR

    try:
        return action(user, bar_id)
    except APIError:
        raise
    except Exception as e:
        logger.error(f"{follow_data.operation} bar {bar_id} failed for user {user['id']}: {e}")
        raise APIError(message, 400, True)

async def get_following_handler(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    return users_db.following_users(user["id"])

async def get_followers_handler(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    return users_db.followers_users(user["id"])

async def get_following_bars_handler(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    return users_db.following_bars(user["id"])
