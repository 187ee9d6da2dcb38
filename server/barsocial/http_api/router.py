from fastapi import APIRouter, Depends, Query
from typing import Dict, Any
from barsocial.http_api.guards import load_user, load_bar, require_owner
from barsocial.http_api.users import (
    list_users_handler,
    search_users_handler,
    get_user_handler,
    create_user_handler,
    update_user_handler,
    delete_user_handler,
    update_fav_teams_handler,
    update_following_handler,
    update_following_bars_handler,
    get_following_handler,
    get_followers_handler,
    get_following_bars_handler,
    CreateUserRequest,
    UpdateUserRequest,
    FavTeamRequest,
    FollowUserRequest,
    FollowBarRequest,
)
from barsocial.http_api.bars import (
    list_bars_handler,
    search_bars_handler,
    geo_search_handler,
    get_bar_handler,
    create_bar_handler,
    delete_bar_handler,
    CreateBarRequest,
)

router = APIRouter()

# Health check endpoint
@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": "1.0"}

# User endpoints
@router.get("/users")
async def list_users(limit: int = Query(50, ge=1), skip: int = Query(0, ge=0)):
    """Get list of users"""
    return await list_users_handler(limit, skip)

@router.post("/users")
async def create_user(user_data: CreateUserRequest):
    """Create new user"""
    return await create_user_handler(user_data)

@router.get("/users/search")
async def search_users(keyword: str = Query("")):
    """Search users by username"""
    return await search_users_handler(keyword)

@router.get("/users/{userId}")
async def get_user(user: Dict[str, Any] = Depends(load_user)):
    """Get user with favorite teams expanded"""
    return await get_user_handler(user)

@router.put("/users/{userId}")
async def update_user(update_data: UpdateUserRequest, user: Dict[str, Any] = Depends(require_owner)):
    """Update user"""
    return await update_user_handler(user, update_data)

@router.delete("/users/{userId}")
async def delete_user(user: Dict[str, Any] = Depends(require_owner)):
    """Delete user"""
    return await delete_user_handler(user)

@router.put("/users/{userId}/favTeam")
async def update_fav_teams(fav_team_data: FavTeamRequest, user: Dict[str, Any] = Depends(require_owner)):
    """Add or remove a favorite team"""
    return await update_fav_teams_handler(user, fav_team_data)

@router.get("/users/{userId}/following")
async def get_following(user: Dict[str, Any] = Depends(load_user)):
    """Get users followed by a user"""
    return await get_following_handler(user)

@router.put("/users/{userId}/following")
async def update_following(follow_data: FollowUserRequest, user: Dict[str, Any] = Depends(require_owner)):
    """Follow or unfollow a user"""
    return await update_following_handler(user, follow_data)

@router.get("/users/{userId}/followers")
async def get_followers(user: Dict[str, Any] = Depends(load_user)):
    """Get followers of a user"""
    return await get_followers_handler(user)

@router.get("/users/{userId}/followingBars")
async def get_following_bars(user: Dict[str, Any] = Depends(load_user)):
    """Get bars followed by a user"""
    return await get_following_bars_handler(user)

@router.put("/users/{userId}/followingBars")
async def update_following_bars(follow_data: FollowBarRequest, user: Dict[str, Any] = Depends(require_owner)):
    """Follow or unfollow a bar"""
    return await update_following_bars_handler(user, follow_data)

# Bar endpoints
@router.get("/bars")
async def list_bars(limit: int = Query(50, ge=1), skip: int = Query(0, ge=0)):
    """Get list of bars"""
    return await list_bars_handler(limit, skip)

@router.post("/bars")
async def create_bar(bar_data: CreateBarRequest):
    """Create new bar"""
    return await create_bar_handler(bar_data)

@router.get("/bars/search")
async def search_bars(keyword: str = Query("")):
    """Search bars by name"""
    return await search_bars_handler(keyword)

@router.get("/bars/geoSearch")
async def geo_search_bars(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    maxDistance: float = Query(..., ge=0),
    keyword: str = Query(..., min_length=1),
):
    """Search bars by name within maxDistance kilometers of a point"""
    return await geo_search_handler(keyword, latitude, longitude, maxDistance)

@router.get("/bars/{barId}")
async def get_bar(bar: Dict[str, Any] = Depends(load_bar)):
    """Get bar"""
    return await get_bar_handler(bar)

@router.delete("/bars/{barId}")
async def delete_bar(bar: Dict[str, Any] = Depends(load_bar)):
    """Delete bar"""
    return await delete_bar_handler(bar)
