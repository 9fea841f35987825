"""Seed a demo academy: admins, two groups, students, a parent and some payments.

Usage:
  python scripts/seed_demo.py            # add demo data (idempotent for admins)
  python scripts/seed_demo.py --students 12
"""
import argparse
import os
import random
import sys
from datetime import timedelta

# Ensure project root is importable when running from scripts/
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app import app
from extensions import db
from models import Admin, Group, Parent, Payment, Student
from utils.parent_meta import encode_parent_metadata
from utils.security import hash_password
from utils.timezone_helpers import local_today

DEMO_ADMINS = [
    ("admin", "admin123", "Academy Admin"),
    ("kevin_teacher", "kevin_0209", "Kevin"),
]

FIRST_NAMES = ["Aziz", "Dilnoza", "Jasur", "Madina", "Otabek", "Sevara", "Timur", "Zarina", "Bekzod", "Nilufar"]
LAST_NAMES = ["Karimov", "Rahimova", "Tursunov", "Yusupova", "Aliyev", "Saidova", "Ergashev", "Nazarova"]
GROUPS = [("A1 Morning", "Beginner"), ("B2 Evening", "Intermediate")]


def ensure_admins():
    admin = None
    for username, password, name in DEMO_ADMINS:
        existing = db.session.execute(db.select(Admin).filter(Admin.username == username)).scalars().first()
        if existing is None:
            existing = Admin(username=username, password=hash_password(password), full_name=name)
            db.session.add(existing)
            print(f"Created admin {username}")
        admin = admin or existing
    db.session.commit()
    return admin


def seed(count: int):
    admin = ensure_admins()
    for name, level in GROUPS:
        if not db.session.execute(db.select(Group.id).filter(Group.name == name, Group.admin_id == admin.id)).first():
            db.session.add(Group(admin_id=admin.id, name=name, level=level, max_students=15))

    today = local_today()
    students = []
    for i in range(count):
        full_name = f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"
        username = f"demo_{random.randint(10000, 99999)}_{i}"
        student = Student(
            admin_id=admin.id,
            full_name=full_name,
            username=username,
            email=f"{username}@example.com",
            password=hash_password("123456"),
            group_name=GROUPS[i % len(GROUPS)][0],
        )
        db.session.add(student)
        students.append(student)
    db.session.flush()

    for student in students:
        # Spread deadlines from a week ago to two weeks ahead
        end = today + timedelta(days=random.randint(-7, 14))
        db.session.add(Payment(
            admin_id=admin.id,
            student_id=student.id,
            amount=random.choice([400000, 500000, 650000]),
            month=end.strftime("%B"),
            status=random.choice(["pending", "pending", "paid"]),
            start_date=end - timedelta(days=30),
            end_date=end,
            due_date=end,
        ))

    if students:
        db.session.add(Parent(
            admin_id=admin.id,
            full_name=f"Parent of {students[0].full_name}",
            phone=encode_parent_metadata({
                "username": "parent_demo",
                "password": hash_password("parent123"),
                "studentId": str(students[0].id),
                "phone": "+998901234567",
            }),
        ))
    db.session.commit()
    print(f"Seeded {len(students)} students for admin {admin.username}")


def main():
    parser = argparse.ArgumentParser(description="Seed demo academy data")
    parser.add_argument("--students", type=int, default=8, help="Number of demo students")
    args = parser.parse_args()
    with app.app_context():
        seed(max(0, args.students))


if __name__ == "__main__":
    main()
