# app/services/shaping.py
from __future__ import annotations

from typing import List, Optional, Sequence

from app.models.recipe import RecipeRecord, RecipeView, UserRecord, UserRef


def _ref(user: UserRecord) -> UserRef:
    return UserRef(_id=user.id, name=user.name, image=user.image)


def project_for_user(records: Sequence[RecipeRecord], user_id: str) -> List[RecipeView]:
    """
    Per-user view of stored recipes: owner/likedBy trimmed to {_id, name, image},
    owns = caller is the owner, liked = caller is in likedBy.
    """
    views: List[RecipeView] = []
    for r in records:
        data = r.model_dump(exclude={"owner", "liked_by"})
        views.append(
            RecipeView(
                **data,
                owner=_ref(r.owner),
                liked_by=[_ref(u) for u in r.liked_by],
                owns=str(r.owner.id) == str(user_id),
                liked=any(str(u.id) == str(user_id) for u in r.liked_by),
            )
        )
    return views


def reconcile(
    views: Sequence[RecipeView],
    updated: Optional[RecipeView],
    delete_id: Optional[str] = None,
) -> List[RecipeView]:
    """
    Replace `updated` in place, or drop `delete_id` when `updated` is None.
    Order of the remaining entries is preserved. No match leaves the list as is.
    """
    target = updated.id if updated is not None else delete_id
    index = next((i for i, v in enumerate(views) if v.id == target), None)
    if index is None:
        return list(views)

    if updated is not None:
        return [*views[:index], updated, *views[index + 1:]]
    return [*views[:index], *views[index + 1:]]
