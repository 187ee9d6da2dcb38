"""
Relationship maintenance between users and bars.

Follow relations are stored twice (user.following / user.followers and
user.followingBars / bar.followers). MongoDB gives no atomicity across two
documents here, so every relation change is applied as a compensated pair:
the first write is undone when the second one fails or matches nothing.
"""
import logging
from typing import Dict, Any, NamedTuple
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.results import UpdateResult
from barsocial.db.connection import get_database
from barsocial.db.users import get_user, PUBLIC_PROJECTION as USER_PROJECTION
from barsocial.db.bars import get_bar
from barsocial.errors import APIError, NotFoundError, ErrorMessages

logger = logging.getLogger(__name__)


class Write(NamedTuple):
    collection: Collection
    filter: Dict[str, Any]
    update: Dict[str, Any]
    undo: Dict[str, Any]

    def apply(self) -> UpdateResult:
        return self.collection.update_one(self.filter, self.update)

    def revert(self) -> UpdateResult:
        return self.collection.update_one(self.filter, self.undo)


def _set_add(field: str, value: str):
    return {"$addToSet": {field: value}}, {"$pull": {field: value}}


def _set_remove(field: str, value: str):
    return {"$pull": {field: value}}, {"$addToSet": {field: value}}


def _write(collection, doc_id: str, change) -> Write:
    update, undo = change
    return Write(collection, {"id": doc_id}, update, undo)


def apply_pair(first: Write, second: Write, not_found_message: str):
    """
    Apply two writes that must both land.

    Raises NotFoundError when the second document is gone; re-raises any
    driver error. In both cases the first write is reverted if it changed
    anything.
    """
    first_result = first.apply()
    try:
        second_result = second.apply()
        if second_result.matched_count == 0:
            raise NotFoundError(not_found_message)
    except Exception as e:
        logger.error(
            f"Relationship update partially applied: {first.collection.name} {first.filter} "
            f"succeeded, {second.collection.name} {second.filter} failed: {e}"
        )
        if first_result.modified_count:
            try:
                first.revert()
                logger.info(f"Reverted {first.collection.name} {first.filter}")
            except Exception as revert_error:
                logger.error(
                    f"Could not revert {first.collection.name} {first.filter}, "
                    f"relationship left asymmetric: {revert_error}"
                )
        raise


def follow_user(actor: Dict[str, Any], target_id: str) -> Dict[str, Any]:
    """Add target to actor.following and actor to target.followers"""
    actor_id = actor["id"]
    if actor_id == target_id:
        raise APIError(ErrorMessages.CANNOT_FOLLOW_SELF, 400, True)

    get_user(target_id)
    users = get_database().users
    apply_pair(
        _write(users, actor_id, _set_add("following", target_id)),
        _write(users, target_id, _set_add("followers", actor_id)),
        f"{ErrorMessages.USER_NOT_FOUND}: {target_id}",
    )
    return get_user(actor_id)


def unfollow_user(actor: Dict[str, Any], target_id: str) -> Dict[str, Any]:
    """Remove target from actor.following and actor from target.followers"""
    actor_id = actor["id"]
    get_user(target_id)
    users = get_database().users
    apply_pair(
        _write(users, actor_id, _set_remove("following", target_id)),
        _write(users, target_id, _set_remove("followers", actor_id)),
        f"{ErrorMessages.USER_NOT_FOUND}: {target_id}",
    )
    return get_user(actor_id)


def follow_bar(user: Dict[str, Any], bar_id: str) -> Dict[str, Any]:
    """Add the user to bar.followers and the bar to user.followingBars"""
    user_id = user["id"]
    get_bar(bar_id)
    db = get_database()
    apply_pair(
        _write(db.bars, bar_id, _set_add("followers", user_id)),
        _write(db.users, user_id, _set_add("followingBars", bar_id)),
        f"{ErrorMessages.USER_NOT_FOUND}: {user_id}",
    )
    return get_user(user_id)


def unfollow_bar(user: Dict[str, Any], bar_id: str) -> Dict[str, Any]:
    """Remove the user from bar.followers and the bar from user.followingBars"""
    user_id = user["id"]
    get_bar(bar_id)
    db = get_database()
    apply_pair(
        _write(db.bars, bar_id, _set_remove("followers", user_id)),
        _write(db.users, user_id, _set_remove("followingBars", bar_id)),
        f"{ErrorMessages.USER_NOT_FOUND}: {user_id}",
    )
    return get_user(user_id)


def _update_fav_teams(user_id: str, update: Dict[str, Any]) -> Dict[str, Any]:
    updated = get_database().users.find_one_and_update(
        {"id": user_id},
        update,
        projection=USER_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFoundError(f"{ErrorMessages.USER_NOT_FOUND}: {user_id}")
    return updated


def add_fav_team(user_id: str, team_id: str) -> Dict[str, Any]:
    return _update_fav_teams(user_id, {"$addToSet": {"favTeams": team_id}})


def remove_fav_team(user_id: str, team_id: str) -> Dict[str, Any]:
    return _update_fav_teams(user_id, {"$pull": {"favTeams": team_id}})


def remove_user_references(user_id: str):
    """Pull a deleted user's id out of every document that points at it"""
    db = get_database()
    following = db.users.update_many({"following": user_id}, {"$pull": {"following": user_id}})
    followers = db.users.update_many({"followers": user_id}, {"$pull": {"followers": user_id}})
    bars = db.bars.update_many({"followers": user_id}, {"$pull": {"followers": user_id}})
    logger.info(
        f"Removed references to user {user_id}: "
        f"{following.modified_count} following, {followers.modified_count} followers, "
        f"{bars.modified_count} bar followers"
    )


def remove_bar_references(bar_id: str):
    """Pull a deleted bar's id out of every user following it"""
    result = get_database().users.update_many({"followingBars": bar_id}, {"$pull": {"followingBars": bar_id}})
    logger.info(f"Removed bar {bar_id} from {result.modified_count} user(s)")
