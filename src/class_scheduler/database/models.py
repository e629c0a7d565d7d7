from typing import Any, Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKeyConstraint, Index, Integer, JSON, Numeric, PrimaryKeyConstraint, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import decimal

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('username', name='users_username_key')
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(Enum('admin', 'teacher', 'student', name='user_role'), default='student')
    name: Mapped[str] = mapped_column(Text)
    date_of_birth: Mapped[Optional[datetime.date]] = mapped_column(Date)
    nationality: Mapped[Optional[str]] = mapped_column(Text)
    location: Mapped[Optional[str]] = mapped_column(Text)
    balance: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2), default=decimal.Decimal('0'))
    base_salary_per_hour: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(10, 2))
    base_payment_per_hour: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(10, 2))
    payment_history: Mapped[list[Any]] = mapped_column(JSONType, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    taught_classes: Mapped[list['Classes']] = relationship('Classes', back_populates='teacher')
    class_enrollments: Mapped[list['ClassStudents']] = relationship('ClassStudents', back_populates='student')
    notifications: Mapped[list['Notifications']] = relationship('Notifications', back_populates='user')


class Subjects(Base):
    __tablename__ = 'subjects'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='subjects_pkey'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text)
    sessions_per_week: Mapped[int] = mapped_column(Integer)
    durations: Mapped[list[int]] = mapped_column(JSONType, default=list)
    price_per_duration: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    classes: Mapped[list['Classes']] = relationship('Classes', back_populates='subject')


class Classes(Base):
    __tablename__ = 'classes'
    __table_args__ = (
        ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='classes_subject_id_fkey'),
        ForeignKeyConstraint(['teacher_id'], ['users.id'], name='classes_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='classes_pkey'),
        Index('idx_classes_teacher_id', 'teacher_id')
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[str] = mapped_column(Text)
    subject_id: Mapped[int] = mapped_column(Integer)
    teacher_id: Mapped[int] = mapped_column(Integer)
    start_date: Mapped[datetime.date] = mapped_column(Date)
    end_date: Mapped[datetime.date] = mapped_column(Date)
    week_days: Mapped[list[str]] = mapped_column(JSONType, default=list)
    time_per_day: Mapped[dict[str, str]] = mapped_column(JSONType, default=dict)
    duration_per_day: Mapped[dict[str, int]] = mapped_column(JSONType, default=dict)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)
    teacher_notes: Mapped[Optional[str]] = mapped_column(Text)
    custom_hour_price: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(10, 2))
    custom_teacher_salary: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(10, 2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    subject: Mapped['Subjects'] = relationship('Subjects', back_populates='classes')
    teacher: Mapped['Users'] = relationship('Users', back_populates='taught_classes')
    class_students: Mapped[list['ClassStudents']] = relationship('ClassStudents', back_populates='class_', cascade='all, delete-orphan')
    appointments: Mapped[list['Appointments']] = relationship('Appointments', back_populates='class_', order_by='Appointments.date')


class ClassStudents(Base):
    __tablename__ = 'class_students'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE', name='class_students_class_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE', name='class_students_student_id_fkey'),
        PrimaryKeyConstraint('id', name='class_students_pkey'),
        UniqueConstraint('class_id', 'student_id', name='class_students_class_id_student_id_key'),
        Index('idx_class_students_student_id', 'student_id')
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(Integer)
    student_id: Mapped[int] = mapped_column(Integer)

    class_: Mapped['Classes'] = relationship('Classes', back_populates='class_students')
    student: Mapped['Users'] = relationship('Users', back_populates='class_enrollments')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE', name='appointments_class_id_fkey'),
        PrimaryKeyConstraint('id', name='appointments_pkey'),
        UniqueConstraint('appointment_id', name='appointments_appointment_id_key'),
        Index('idx_appointments_class_id', 'class_id')
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    appointment_id: Mapped[str] = mapped_column(String(64))
    class_id: Mapped[int] = mapped_column(Integer)
    date: Mapped[datetime.date] = mapped_column(Date)
    time: Mapped[str] = mapped_column(String(5))
    duration: Mapped[int] = mapped_column(Integer)
    teacher_note: Mapped[Optional[str]] = mapped_column(Text)
    student_note: Mapped[Optional[str]] = mapped_column(Text)
    student_attendance: Mapped[Optional[bool]] = mapped_column(Boolean)
    teacher_attendance: Mapped[Optional[bool]] = mapped_column(Boolean)
    assignment: Mapped[Optional[str]] = mapped_column(Text)
    student_rating: Mapped[Optional[int]] = mapped_column(Integer)
    teacher_rating: Mapped[Optional[int]] = mapped_column(Integer)
    meet_link: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Enum('scheduled', 'completed', 'cancelled', name='appointment_status'), default='scheduled')

    class_: Mapped['Classes'] = relationship('Classes', back_populates='appointments')
    notifications: Mapped[list['Notifications']] = relationship('Notifications', back_populates='related_appointment')


class Notifications(Base):
    __tablename__ = 'notifications'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='notifications_user_id_fkey'),
        ForeignKeyConstraint(['related_appointment_id'], ['appointments.id'], ondelete='SET NULL', name='notifications_related_appointment_id_fkey'),
        PrimaryKeyConstraint('id', name='notifications_pkey'),
        Index('idx_notifications_user_id', 'user_id')
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(Enum('upcoming_class', 'assignment_due', 'class_reminder', name='notification_type'))
    title: Mapped[str] = mapped_column(Text)
    message: Mapped[str] = mapped_column(Text)
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=_utcnow)
    scheduled_for: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    related_appointment_id: Mapped[Optional[int]] = mapped_column(Integer)

    user: Mapped['Users'] = relationship('Users', back_populates='notifications')
    related_appointment: Mapped[Optional['Appointments']] = relationship('Appointments', back_populates='notifications')
