from caltrack.extensions import db

class DailyLog(db.Model):
    __tablename__ = "daily_logs"
    __table_args__ = (
        db.UniqueConstraint("user_id", "log_date", name="uq_daily_logs_user_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    log_date = db.Column(db.Date, nullable=False)
    weight_kg = db.Column(db.Numeric(6, 2))
