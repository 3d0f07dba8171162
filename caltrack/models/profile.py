from caltrack.extensions import db

class Profile(db.Model):
    __tablename__ = "profiles"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    display_name = db.Column(db.String(120), nullable=False, default="")
    # Free-text join key; users sharing it see each other's logs
    group_code = db.Column(db.String(120), nullable=False, default="", index=True)

    user = db.relationship("User", back_populates="profile")
