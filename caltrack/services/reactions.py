"""
Reaction Service

Aggregates emoji reactions on food entries and toggles them optimistically:
the local reaction list is patched first, the mutation is issued, and the patch
is inverted if the mutation fails.
"""

import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.models.entry_reaction import EntryReaction
from caltrack.models.food_entry import FoodEntry
from caltrack.services.profiles import can_view_user

logger = logging.getLogger(__name__)

# Offered for new reactions. Stored reactions outside this list are still counted.
ALLOWED_EMOJIS = ["👍", "🔥", "💪", "😋", "🎉", "❤️", "😮"]


def _get(reaction: Any, name: str):
    if isinstance(reaction, dict):
        return reaction.get(name)
    return getattr(reaction, name, None)


def serialize_reaction(reaction: EntryReaction) -> Dict[str, Any]:
    return {
        "entry_id": reaction.entry_id,
        "user_id": reaction.user_id,
        "emoji": reaction.emoji,
    }


def by_emoji(reactions: Iterable[Any]) -> "OrderedDict[str, int]":
    """Count reactions per emoji, allow-listed emoji first."""
    seen: Dict[str, int] = {}
    for r in reactions:
        emoji = _get(r, "emoji")
        if not emoji:
            continue
        seen[emoji] = seen.get(emoji, 0) + 1

    counts: "OrderedDict[str, int]" = OrderedDict()
    for emoji in ALLOWED_EMOJIS:
        if emoji in seen:
            counts[emoji] = seen[emoji]
    for emoji, count in seen.items():
        if emoji not in counts:
            counts[emoji] = count
    return counts


def has_reacted(reactions: Iterable[Any], user_id: int, emoji: str) -> bool:
    return any(_get(r, "user_id") == user_id and _get(r, "emoji") == emoji for r in reactions)


def summarize(reactions: Iterable[Any], user_id: int) -> List[Dict[str, Any]]:
    reactions = list(reactions)
    return [
        {"emoji": emoji, "count": count, "mine": has_reacted(reactions, user_id, emoji)}
        for emoji, count in by_emoji(reactions).items()
    ]


def reactions_for_entries(entry_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
    if not entry_ids:
        return {}
    rows = (
        EntryReaction.query
        .filter(EntryReaction.entry_id.in_(entry_ids))
        .order_by(EntryReaction.created_at.asc(), EntryReaction.id.asc())
        .all()
    )
    grouped: Dict[int, List[Dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row.entry_id, []).append(serialize_reaction(row))
    return grouped


class ToggleState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class OptimisticToggle:
    """Two-phase toggle of one (entry, user, emoji) reaction on a local list."""

    def __init__(self, reactions: Iterable[Dict[str, Any]], entry_id: int, user_id: int, emoji: str):
        self.reactions = list(reactions)
        self.entry_id = entry_id
        self.user_id = user_id
        self.emoji = emoji
        self.adding = not has_reacted(self.reactions, user_id, emoji)
        self.state = ToggleState.IDLE
        self.error: Optional[Exception] = None
        self._removed_at: Optional[int] = None
        self._removed: Optional[Dict[str, Any]] = None

    def _mine(self, r: Dict[str, Any]) -> bool:
        return _get(r, "user_id") == self.user_id and _get(r, "emoji") == self.emoji

    def apply(self) -> None:
        if self.adding:
            self.reactions.append({"entry_id": self.entry_id, "user_id": self.user_id, "emoji": self.emoji})
        else:
            for i, r in enumerate(self.reactions):
                if self._mine(r):
                    self._removed_at, self._removed = i, r
                    del self.reactions[i]
                    break
        self.state = ToggleState.PENDING

    def rollback(self) -> None:
        if self.adding:
            for i in range(len(self.reactions) - 1, -1, -1):
                if self._mine(self.reactions[i]):
                    del self.reactions[i]
                    break
        elif self._removed is not None:
            self.reactions.insert(self._removed_at, self._removed)
        self.state = ToggleState.ROLLED_BACK

    def run(self, mutation: Callable[[bool], None]) -> List[Dict[str, Any]]:
        """Apply, mutate, then commit or roll back. ``mutation`` receives ``adding``."""
        self.apply()
        try:
            mutation(self.adding)
        except Exception as e:
            self.error = e
            self.rollback()
            logger.warning("Reaction toggle rolled back for entry %s: %s", self.entry_id, e)
            return self.reactions
        self.state = ToggleState.COMMITTED
        return self.reactions


def _persist_toggle(entry_id: int, user_id: int, emoji: str) -> Callable[[bool], None]:
    def mutation(adding: bool) -> None:
        try:
            if adding:
                db.session.add(EntryReaction(entry_id=entry_id, user_id=user_id, emoji=emoji))
            else:
                EntryReaction.query.filter_by(
                    entry_id=entry_id, user_id=user_id, emoji=emoji
                ).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
    return mutation


def toggle_reaction(
    user_id: int,
    entry_id: int,
    emoji: str,
    mutation: Optional[Callable[[bool], None]] = None,
) -> Dict[str, Any]:
    """
    Toggle the user's ``emoji`` reaction on an entry.

    Raises:
        ValueError: If the entry is missing, not visible, or the emoji is not offered
    """
    entry = db.session.get(FoodEntry, entry_id)
    if entry is None:
        raise ValueError("ENTRY_NOT_FOUND: entry does not exist")
    if not can_view_user(user_id, entry.user_id):
        raise ValueError("FORBIDDEN: entry is not shared with you")

    current = reactions_for_entries([entry_id]).get(entry_id, [])
    toggle = OptimisticToggle(current, entry_id, user_id, emoji)
    if toggle.adding and emoji not in ALLOWED_EMOJIS:
        raise ValueError("EMOJI_NOT_ALLOWED: emoji is not offered for reactions")

    result = toggle.run(mutation or _persist_toggle(entry_id, user_id, emoji))
    return {
        "entry_id": entry_id,
        "emoji": emoji,
        "state": toggle.state.value,
        "rolled_back": toggle.state == ToggleState.ROLLED_BACK,
        "error": str(toggle.error) if toggle.error else None,
        "reacted": has_reacted(result, user_id, emoji),
        "reactions": summarize(result, user_id),
    }
