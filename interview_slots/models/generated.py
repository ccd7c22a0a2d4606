from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, Integer, Text, Time, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Interviewers(Base):
    __tablename__ = 'interviewers'

    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    slug = Column(Text, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    availability_slots = relationship('AvailabilitySlots', back_populates='interviewer')


class AvailabilitySlots(Base):
    __tablename__ = 'availability_slots'
    __table_args__ = (
        Index('idx_availability_slots_interviewer_date', 'interviewer_id', 'date'),
    )

    interviewer_id = Column(ForeignKey('interviewers.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_duration = Column(Integer, nullable=False, server_default=text('30'))
    id = Column(Integer, primary_key=True)
    meeting_type = Column(Text)
    meeting_title = Column(Text)
    meeting_description = Column(Text)
    is_recurring = Column(Boolean, nullable=False, server_default=text('false'))
    recurrence_rule = Column(Text)
    admin_notes = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    interviewer = relationship('Interviewers', back_populates='availability_slots')
