from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()
metadata = Base.metadata

ACTIVE_STATUSES = ("pending", "confirmed")


class ScheduleWindows(Base):
    __tablename__ = 'schedule_windows'
    __table_args__ = (
        Index('ix_schedule_windows_provider_day', 'provider_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Text, nullable=False)  # "HH:MM"
    end_time = Column(Text, nullable=False)
    slot_duration_minutes = Column(Integer, nullable=False, server_default=text('30'))


class BreakWindows(Base):
    __tablename__ = 'break_windows'
    __table_args__ = (
        Index('ix_break_windows_provider', 'provider_id'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, nullable=False)
    day_of_week = Column(Integer)  # recurring break
    date = Column(Date)  # one-off break
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    label = Column(Text, nullable=False, server_default=text("'Break'"))


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        # At most one non-terminal appointment per provider/date/time
        Index(
            'uq_appointments_active_slot',
            'provider_id', 'date', 'time',
            unique=True,
            sqlite_where=text("status IN ('pending', 'confirmed')"),
            postgresql_where=text("status IN ('pending', 'confirmed')"),
        ),
        Index('ix_appointments_patient', 'patient_id'),
    )

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, nullable=False)
    provider_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    time = Column(Text, nullable=False)  # "HH:MM"
    duration_minutes = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    type = Column(Text, nullable=False, server_default=text("'consultation'"))
    reason = Column(Text, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
    confirmed_at = Column(DateTime)
    cancellation_reason = Column(Text)
    rejection_reason = Column(Text)

    slot = relationship('Slots', back_populates='appointment', uselist=False)


class Slots(Base):
    __tablename__ = 'slots'

    id = Column(Text, primary_key=True)  # "{provider_id}|{date}|{HH:MM}"
    provider_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    is_break = Column(Boolean, nullable=False, server_default=text('0'))
    is_booked = Column(Boolean, nullable=False, server_default=text('0'))
    appointment_id = Column(ForeignKey('appointments.id', ondelete='SET NULL'))

    appointment = relationship('Appointments', back_populates='slot')
