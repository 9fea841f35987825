from datetime import datetime

from extensions import db


def _iso(value):
    return value.isoformat() if value is not None else None


class Admin(db.Model):
    __tablename__ = 'admins'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), nullable=False, unique=True)
    password = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(150), nullable=False, default='')
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'isActive': bool(self.is_active),
            'role': 'admin',
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Admin {self.username}>'


class Group(db.Model):
    __tablename__ = 'study_groups'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    teacher = db.Column(db.String(150))
    schedule = db.Column(db.String(150))
    # Beginner / Elementary / Intermediate / Advanced
    level = db.Column(db.String(20))
    max_students = db.Column(db.Integer)
    color = db.Column(db.String(64), default='from-orange-500 to-red-500')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self, student_count=None):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'name': self.name,
            'description': self.description,
            'teacher': self.teacher,
            'schedule': self.schedule,
            'level': self.level,
            'maxStudents': self.max_students,
            'color': self.color,
            'studentCount': student_count if student_count is not None else 0,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Group {self.name}>'


class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    username = db.Column(db.String(100), nullable=False, unique=True)
    password = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='active')
    # Group is referenced by name, like the admin UI does
    group_name = db.Column('group', db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    payments = db.relationship('Payment', backref='student', cascade="all, delete-orphan")
    attendance = db.relationship('Attendance', backref='student', cascade="all, delete-orphan")
    scores = db.relationship('Score', backref='student', cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'username': self.username,
            'status': self.status,
            'group': self.group_name,
            'role': 'student',
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Student {self.full_name} ({self.username})>'


class Parent(db.Model):
    __tablename__ = 'parents'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    full_name = db.Column(db.String(150), nullable=False, default='Parent')
    email = db.Column(db.String(255))
    # Plain phone number or an encoded metadata bag, see utils.parent_meta
    phone = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Parent {self.full_name}>'


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=True, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    month = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default='pending')
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    due_date = db.Column(db.Date)
    penalty_per_day = db.Column(db.Integer, nullable=False, default=10000)
    paid_at = db.Column(db.Date)
    note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'studentId': self.student_id,
            'studentName': self.student.full_name if self.student else None,
            'amount': float(self.amount or 0),
            'month': self.month,
            'status': self.status,
            'startDate': _iso(self.start_date),
            'endDate': _iso(self.end_date),
            'dueDate': _iso(self.due_date),
            'penaltyPerDay': self.penalty_per_day,
            'paidAt': _iso(self.paid_at),
            'note': self.note,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Payment StudentID={self.student_id} Amount={self.amount} {self.status}>'


class Attendance(db.Model):
    __tablename__ = 'attendance'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=True, index=True)
    date = db.Column(db.Date, nullable=False)
    # present / absent / late
    status = db.Column(db.String(20), nullable=False, default='present')
    note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'studentId': self.student_id,
            'studentName': self.student.full_name if self.student else None,
            'date': _iso(self.date),
            'status': self.status,
            'note': self.note,
            'createdAt': _iso(self.created_at),
        }


class Score(db.Model):
    __tablename__ = 'scores'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=True, index=True)
    # weekly / mock
    score_type = db.Column(db.String(20), nullable=False, default='weekly')
    level = db.Column(db.String(20))
    subject = db.Column(db.String(100), nullable=False, default='overall')
    # {category: {"score": .., "maxScore": .., "percent": ..}}
    breakdown = db.Column(db.JSON, nullable=False, default=dict)
    overall_percent = db.Column(db.Float, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'studentId': self.student_id,
            'studentName': self.student.full_name if self.student else None,
            'scoreType': self.score_type,
            'level': self.level,
            'subject': self.subject,
            'breakdown': self.breakdown or {},
            'overallPercent': self.overall_percent,
            # Older clients read the single "value" field
            'value': self.overall_percent,
            'createdAt': _iso(self.created_at),
        }


class Material(db.Model):
    __tablename__ = 'materials'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, index=True, nullable=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    file_url = db.Column(db.String(1024), nullable=False)
    file_type = db.Column(db.String(20), nullable=False, default='document')
    group_name = db.Column('group', db.String(100))
    uploaded_by = db.Column(db.String(150))
    due_date = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'title': self.title,
            'description': self.description,
            'fileUrl': self.file_url,
            'fileType': self.file_type,
            'group': self.group_name,
            'uploadedBy': self.uploaded_by,
            'dueDate': _iso(self.due_date),
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Material {self.title}>'
