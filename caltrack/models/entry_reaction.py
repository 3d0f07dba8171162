from datetime import datetime
from caltrack.extensions import db

class EntryReaction(db.Model):
    __tablename__ = "entry_reactions"
    __table_args__ = (
        db.UniqueConstraint("entry_id", "user_id", "emoji", name="uq_entry_reactions_entry_user_emoji"),
    )

    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.Integer, db.ForeignKey("food_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    emoji = db.Column(db.String(16), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
