"""
Database Models using SQLAlchemy.

These define the database schema for the site's content resources. Column
attributes are the snake_case forms of the field names declared in
sitecms.domain.resources; lists, mappings and stored file references live in
JSON columns. They are NOT related to:
- API schemas (see sitecms.schemas.api_schemas)
- The uploaded files themselves (kept by sitecms.storage)
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, Date, DateTime, Text, JSON
from sqlalchemy.orm import declarative_base
import datetime
import uuid

Base = declarative_base()

def generate_uuid():
    return str(uuid.uuid4())

def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class TimestampedMixin:
    id = Column(String, primary_key=True, default=generate_uuid)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Achievement(TimestampedMixin, Base):
    __tablename__ = "achievements"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String, default="milestone")
    featured = Column(Boolean, default=False)
    images = Column(JSON, default=list)
    documents = Column(JSON, default=list)


class Service(TimestampedMixin, Base):
    __tablename__ = "services"

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, default="FiCode")
    features = Column(JSON, default=list)
    price = Column(String, nullable=False)
    popular = Column(Boolean, default=False, index=True)
    gradient = Column(String)
    order = Column(Integer, default=0)
    active = Column(Boolean, default=True, index=True)
    category = Column(String, default="development", index=True)
    duration = Column(String)
    tags = Column(JSON, default=list)
    images = Column(JSON, default=list)


class Project(TimestampedMixin, Base):
    __tablename__ = "projects"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    status = Column(String, default="planning", index=True)
    progress = Column(Integer, default=0)
    technologies = Column(JSON, default=list)
    category = Column(String, index=True)
    budget = Column(Float)
    client = Column(String)
    images = Column(JSON, default=list)


class TeamMember(TimestampedMixin, Base):
    __tablename__ = "team_members"

    name = Column(String(100), nullable=False)
    position = Column(String(100), nullable=False)
    department = Column(String(100), default="General", index=True)
    email = Column(String)
    phone = Column(String(20))
    bio = Column(Text)
    skills = Column(JSON, default=list)
    image = Column(JSON, default=dict)
    social_links = Column(JSON, default=dict)
    join_date = Column(Date)
    is_leader = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True, index=True)
    order = Column(Integer, default=0)


class Content(TimestampedMixin, Base):
    __tablename__ = "content"

    section = Column(String, nullable=False, unique=True)
    title = Column(String)
    subtitle = Column(String)
    content = Column(Text)
    images = Column(JSON, default=list)
    meta_data = Column(JSON, default=dict)


class ContactMessage(TimestampedMixin, Base):
    __tablename__ = "contact_messages"

    name = Column(String(100), nullable=False)
    email = Column(String(200), nullable=False)
    subject = Column(String(200))
    message = Column(Text, nullable=False)
    query_type = Column(String, default="general")
    urgency = Column(String, default="medium")
    status = Column(String, default="new", index=True)


class SiteCustomization(TimestampedMixin, Base):
    __tablename__ = "site_customizations"

    logo = Column(JSON, default=dict)
    favicon = Column(JSON, default=dict)
    fonts = Column(JSON, default=dict)
    colors = Column(JSON, default=dict)
    background_image = Column(JSON, default=dict)
    custom_css = Column(Text, default="")
    social_media = Column(JSON, default=dict)
    contact = Column(JSON, default=dict)
    seo = Column(JSON, default=dict)
    version = Column(Integer, default=1, nullable=False)


MODELS = {
    "achievements": Achievement,
    "services": Service,
    "projects": Project,
    "team": TeamMember,
    "content": Content,
    "contact": ContactMessage,
    "customizations": SiteCustomization,
}
