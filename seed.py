from datetime import timedelta

from caltrack import create_app
from caltrack.extensions import db
from caltrack.models.food_entry import FoodEntry
from caltrack.models.profile import Profile
from caltrack.models.user import User
from caltrack.services.day_log_service import ensure_daily_log
from caltrack.services.goals import upsert_weekly_goal
from caltrack.utils.auth import hash_password
from caltrack.utils.dates import today_local

app = create_app()

with app.app_context():
    # ensure tables exist (non-destructive: won't alter existing columns)
    db.create_all()

    def ensure_user(email, name, group_code):
        user = User.query.filter_by(email=email).first()
        if not user:
            user = User(email=email, password=hash_password("secret"))
            db.session.add(user)
            db.session.flush()
            db.session.add(Profile(user_id=user.id, display_name=name, group_code=group_code))
            db.session.commit()
        return user

    alice = ensure_user("alice@example.com", "Alice", "lunch-club")
    bob = ensure_user("bob@example.com", "Bob", "lunch-club")

    today = today_local()
    meals = [
        ("Oatmeal", 60, 230, 8, 40, 4, "Breakfast"),
        ("Banana", 120, 105, 1, 27, 0, "Snack"),
        ("Chicken rice bowl", 350, 610, 42, 70, 14, "Lunch"),
        ("Greek yogurt", 170, 100, 17, 6, 0, "Snack"),
    ]

    for user in (alice, bob):
        for offset in range(3):
            log = ensure_daily_log(user.id, today - timedelta(days=offset))
            if FoodEntry.query.filter_by(daily_log_id=log.id).count():
                continue
            for name, grams, kcal, p, c, f, meal in meals:
                db.session.add(FoodEntry(
                    daily_log_id=log.id, user_id=user.id, name=name, grams=grams,
                    calories=kcal, protein_g=p, carbs_g=c, fat_g=f, meal=meal,
                ))
        db.session.commit()

    upsert_weekly_goal(alice.id, today, "cut", 2000, 150)
    upsert_weekly_goal(bob.id, today, "bulk", 2800, 170)

    print("Seed complete: alice@example.com / bob@example.com (password: secret)")
