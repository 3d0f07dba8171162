from datetime import datetime
from caltrack.extensions import db

class WeeklyGoal(db.Model):
    __tablename__ = "weekly_goals"
    __table_args__ = (
        db.UniqueConstraint("user_id", "week_start", name="uq_weekly_goals_user_week"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    week_start = db.Column(db.Date, nullable=False)
    mode = db.Column(db.String(10), nullable=False, default="cut")
    # Daily targets, even though stored per week
    calorie_goal = db.Column(db.Integer)
    protein_goal_g = db.Column(db.Integer)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
