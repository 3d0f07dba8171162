from datetime import datetime
from caltrack.extensions import db

class FoodEntry(db.Model):
    __tablename__ = "food_entries"

    id = db.Column(db.Integer, primary_key=True)
    daily_log_id = db.Column(db.Integer, db.ForeignKey("daily_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    grams = db.Column(db.Integer)
    calories = db.Column(db.Integer, nullable=False, default=0)
    protein_g = db.Column(db.Integer, nullable=False, default=0)
    carbs_g = db.Column(db.Integer, nullable=False, default=0)
    fat_g = db.Column(db.Integer, nullable=False, default=0)
    meal = db.Column(db.String(20), nullable=False, default="Snack")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
