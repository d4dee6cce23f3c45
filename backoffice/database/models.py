"""
Database Models - Portfolio Content Schema

Declarative SQLAlchemy models for every collection the back-office reads and
writes. Multilingual attributes are JSON objects keyed by locale code.

Singleton pages:
- abouts, home_heros, service_heroes, call_to_actions, callme_banners,
  hire_me_banners, contacts, web_settings, privacy_policies,
  terms_of_service, cookie_policies

Collections:
- articles, experiences, projects, skills, certificates, featured services,
  service processes, package pricing, testimonials and their categories

Junction tables hold (parent_id, child_id) pairs only.

Analytics:
- visitors, visitor_events
"""

from datetime import date, datetime
from typing import Optional
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class TimestampMixin:
    """created_at / updated_at audit columns"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class TitledMixin(TimestampMixin):
    """Integer identity plus a multilingual title"""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[dict]] = mapped_column(JSON)


# =============================================================================
# SINGLETON PAGES
# =============================================================================

class About(TitledMixin, Base):
    __tablename__ = "abouts"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    image: Mapped[Optional[str]] = mapped_column(String(500))
    title_image: Mapped[Optional[str]] = mapped_column(String(500))
    subtitle_image: Mapped[Optional[str]] = mapped_column(String(500))


class HomeHero(TitledMixin, Base):
    __tablename__ = "home_heros"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    image: Mapped[Optional[str]] = mapped_column(String(500))


class ServiceHero(TitledMixin, Base):
    __tablename__ = "service_heroes"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    icon: Mapped[Optional[str]] = mapped_column(String(500))


class CallToAction(TitledMixin, Base):
    __tablename__ = "call_to_actions"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)


class CallmeBanner(TitledMixin, Base):
    __tablename__ = "callme_banners"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)


class HireMeBanner(TitledMixin, Base):
    __tablename__ = "hire_me_banners"

    free_date: Mapped[Optional[date]] = mapped_column(Date)


class Contact(TimestampMixin, Base):
    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    no_phone: Mapped[Optional[str]] = mapped_column(String(30))
    location: Mapped[Optional[dict]] = mapped_column(JSON)


class WebSetting(TimestampMixin, Base):
    __tablename__ = "web_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title_website: Mapped[Optional[dict]] = mapped_column(JSON)
    logo: Mapped[Optional[str]] = mapped_column(String(500))
    favicon: Mapped[Optional[str]] = mapped_column(String(500))
    copyright: Mapped[Optional[str]] = mapped_column(String(255))
    cv: Mapped[Optional[str]] = mapped_column(String(500))
    portfolio: Mapped[Optional[str]] = mapped_column(String(500))


class PrivacyPolicy(TitledMixin, Base):
    __tablename__ = "privacy_policies"

    description: Mapped[Optional[dict]] = mapped_column(JSON)


class TermsOfService(TitledMixin, Base):
    __tablename__ = "terms_of_service"

    description: Mapped[Optional[dict]] = mapped_column(JSON)


class CookiePolicy(TitledMixin, Base):
    __tablename__ = "cookie_policies"

    description: Mapped[Optional[dict]] = mapped_column(JSON)


# =============================================================================
# BANNERS, CONTACT AND SOCIAL
# =============================================================================

class CallmeBannerItem(TitledMixin, Base):
    __tablename__ = "callme_banner_items"

    banner_id: Mapped[Optional[int]] = mapped_column(ForeignKey("callme_banners.id"))
    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)


class ContactForm(TimestampMixin, Base):
    __tablename__ = "contact_forms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(255))
    message: Mapped[Optional[str]] = mapped_column(Text)


class SocialMedia(TitledMixin, Base):
    __tablename__ = "social_media"

    icon: Mapped[Optional[str]] = mapped_column(String(500))
    link: Mapped[Optional[str]] = mapped_column(String(500))


# =============================================================================
# ARTICLES
# =============================================================================

class ArticleCategory(TitledMixin, Base):
    __tablename__ = "article_categories"

    icon: Mapped[Optional[str]] = mapped_column(String(500))
    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class ArticleTag(TitledMixin, Base):
    __tablename__ = "article_tags"

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Article(TitledMixin, Base):
    __tablename__ = "articles"

    image: Mapped[Optional[str]] = mapped_column(String(500))
    preview_description: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    post_schedule: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    article_tag_id: Mapped[Optional[int]] = mapped_column(ForeignKey("article_tags.id"))
    article_category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("article_categories.id"))
    minute_read: Mapped[Optional[int]] = mapped_column(Integer)
    total_views: Mapped[int] = mapped_column(Integer, default=0)
    like: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("ix_articles_category", "article_category_id"),
        Index("ix_articles_active", "is_active"),
    )


# =============================================================================
# SKILLS, EXPERIENCE, PROJECTS, CERTIFICATES
# =============================================================================

class SkillCategory(TitledMixin, Base):
    __tablename__ = "skill_categories"

    slug: Mapped[Optional[str]] = mapped_column(String(200), unique=True)
    icon: Mapped[Optional[str]] = mapped_column(String(500))


class Skill(TitledMixin, Base):
    __tablename__ = "skills"

    slug: Mapped[Optional[str]] = mapped_column(String(200), unique=True)
    icon: Mapped[Optional[str]] = mapped_column(String(500))
    percent_skills: Mapped[Optional[int]] = mapped_column(Integer)
    long_experience: Mapped[Optional[float]] = mapped_column(Float)
    skill_category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("skill_categories.id"))


class ExperienceCategory(TitledMixin, Base):
    __tablename__ = "experience_categories"


class Experience(TitledMixin, Base):
    __tablename__ = "experiences"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    key_achievements: Mapped[Optional[dict]] = mapped_column(JSON)
    location: Mapped[Optional[dict]] = mapped_column(JSON)
    experience_long: Mapped[Optional[float]] = mapped_column(Float)
    company_link: Mapped[Optional[str]] = mapped_column(String(500))
    company_logo: Mapped[Optional[str]] = mapped_column(String(500))
    experience_category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("experience_categories.id")
    )


class ExperienceSkill(Base):
    __tablename__ = "experience_skills"

    experience_id: Mapped[int] = mapped_column(ForeignKey("experiences.id"), primary_key=True)
    skill_id: Mapped[int] = mapped_column(ForeignKey("skills.id"), primary_key=True)


class Project(TitledMixin, Base):
    __tablename__ = "projects"

    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    meta_title: Mapped[Optional[str]] = mapped_column(String(255))
    meta_description: Mapped[Optional[str]] = mapped_column(Text)
    link_demo: Mapped[Optional[str]] = mapped_column(String(500))
    link_source_code: Mapped[Optional[str]] = mapped_column(String(500))


class ProjectSkill(Base):
    __tablename__ = "project_skills"

    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), primary_key=True)
    skill_id: Mapped[int] = mapped_column(ForeignKey("skills.id"), primary_key=True)


class ProjectImage(TimestampMixin, Base):
    __tablename__ = "project_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(500))

    __table_args__ = (
        Index("ix_project_images_project", "project_id"),
    )


class Certificate(TitledMixin, Base):
    __tablename__ = "certificates"

    description: Mapped[Optional[dict]] = mapped_column(JSON)
    pdf: Mapped[Optional[str]] = mapped_column(String(500))
    image: Mapped[Optional[str]] = mapped_column(String(500))
    issued_by: Mapped[Optional[str]] = mapped_column(String(255))
    issued_date: Mapped[Optional[date]] = mapped_column(Date)
    credential_id: Mapped[Optional[str]] = mapped_column(String(255))
    valid_until: Mapped[Optional[date]] = mapped_column(Date)


class CertificateSkill(Base):
    __tablename__ = "certificate_skills"

    certificate_id: Mapped[int] = mapped_column(ForeignKey("certificates.id"), primary_key=True)
    skill_id: Mapped[int] = mapped_column(ForeignKey("skills.id"), primary_key=True)


# =============================================================================
# SERVICES
# =============================================================================

class ServiceBenefit(TitledMixin, Base):
    __tablename__ = "service_benefits"


class FeaturedService(TitledMixin, Base):
    __tablename__ = "featured_services"

    preview_description: Mapped[Optional[dict]] = mapped_column(JSON)
    description: Mapped[Optional[dict]] = mapped_column(JSON)
    icon: Mapped[Optional[str]] = mapped_column(String(500))


class FeaturedServiceBenefit(Base):
    __tablename__ = "featured_service_benefits"

    featured_service_id: Mapped[int] = mapped_column(
        ForeignKey("featured_services.id"), primary_key=True
    )
    benefit_id: Mapped[int] = mapped_column(ForeignKey("service_benefits.id"), primary_key=True)


class FeaturedServiceSkill(Base):
    __tablename__ = "featured_service_skills"

    featured_service_id: Mapped[int] = mapped_column(
        ForeignKey("featured_services.id"), primary_key=True
    )
    skill_id: Mapped[int] = mapped_column(ForeignKey("skills.id"), primary_key=True)


class ProcessActivity(TitledMixin, Base):
    __tablename__ = "process_activities"


class ServiceProcess(TitledMixin, Base):
    __tablename__ = "service_processes"

    description: Mapped[Optional[dict]] = mapped_column(JSON)
    work_duration: Mapped[Optional[dict]] = mapped_column(JSON)
    icon: Mapped[Optional[str]] = mapped_column(String(500))
    order_no: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class ServiceProcessActivityLink(Base):
    __tablename__ = "service_process_activity_links"

    service_process_id: Mapped[int] = mapped_column(
        ForeignKey("service_processes.id"), primary_key=True
    )
    process_activity_id: Mapped[int] = mapped_column(
        ForeignKey("process_activities.id"), primary_key=True
    )


class PromiseItem(TitledMixin, Base):
    __tablename__ = "promise_items"

    icon: Mapped[Optional[str]] = mapped_column(String(500))
    subtitle: Mapped[Optional[dict]] = mapped_column(JSON)


class Faq(TitledMixin, Base):
    __tablename__ = "faqs"

    description: Mapped[Optional[dict]] = mapped_column(JSON)


class Brand(TitledMixin, Base):
    __tablename__ = "brands"

    image: Mapped[Optional[str]] = mapped_column(String(500))


class TechStackSkill(TitledMixin, Base):
    __tablename__ = "tech_stack_skills"


class TechStack(TitledMixin, Base):
    __tablename__ = "tech_stacks"

    icon: Mapped[Optional[str]] = mapped_column(String(500))
    tech_stack_skill_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tech_stack_skills.id")
    )


# =============================================================================
# PACKAGE PRICING
# =============================================================================

class PackageBenefit(TitledMixin, Base):
    __tablename__ = "package_benefits"

    slug: Mapped[Optional[str]] = mapped_column(String(200), unique=True)


class PackageExclusion(TitledMixin, Base):
    __tablename__ = "package_exclusions"

    slug: Mapped[Optional[str]] = mapped_column(String(200), unique=True)


class PackagePricing(TitledMixin, Base):
    __tablename__ = "package_pricing"

    description: Mapped[Optional[dict]] = mapped_column(JSON)
    work_duration: Mapped[Optional[dict]] = mapped_column(JSON)
    price: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)


class PackagePricingBenefit(Base):
    __tablename__ = "package_pricing_benefits"

    package_pricing_id: Mapped[int] = mapped_column(
        ForeignKey("package_pricing.id"), primary_key=True
    )
    package_benefit_id: Mapped[int] = mapped_column(
        ForeignKey("package_benefits.id"), primary_key=True
    )


class PackagePricingExclusion(Base):
    __tablename__ = "package_pricing_exclusions"

    package_pricing_id: Mapped[int] = mapped_column(
        ForeignKey("package_pricing.id"), primary_key=True
    )
    package_exclusion_id: Mapped[int] = mapped_column(
        ForeignKey("package_exclusions.id"), primary_key=True
    )


# =============================================================================
# TESTIMONIALS
# =============================================================================

class TestimonialCategory(TitledMixin, Base):
    __tablename__ = "testimonial_categories"


class Testimonial(TimestampMixin, Base):
    __tablename__ = "testimonials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile: Mapped[Optional[str]] = mapped_column(String(500))
    name: Mapped[Optional[str]] = mapped_column(String(200))
    job: Mapped[Optional[dict]] = mapped_column(JSON)
    star: Mapped[Optional[int]] = mapped_column(Integer)
    project: Mapped[Optional[dict]] = mapped_column(JSON)
    industry: Mapped[Optional[dict]] = mapped_column(JSON)
    year: Mapped[Optional[int]] = mapped_column(Integer)
    message: Mapped[Optional[dict]] = mapped_column(JSON)
    testimonial_category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("testimonial_categories.id")
    )

    __table_args__ = (
        Index("ix_testimonials_year", "year"),
        Index("ix_testimonials_star", "star"),
    )


# =============================================================================
# VISITOR ANALYTICS
# =============================================================================

class Visitor(TimestampMixin, Base):
    """
    Raw page view row

    One row per tracked page view. Browser, OS, device type and bot flag are
    parsed from the user agent at insert time.
    """
    __tablename__ = "visitors"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    session_id: Mapped[str] = mapped_column(String(100), nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    browser: Mapped[Optional[str]] = mapped_column(String(50))
    os: Mapped[Optional[str]] = mapped_column(String(50))
    device_type: Mapped[Optional[str]] = mapped_column(String(20))
    is_bot: Mapped[bool] = mapped_column(Boolean, default=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    region: Mapped[Optional[str]] = mapped_column(String(100))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    page_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    referer: Mapped[Optional[str]] = mapped_column(String(2000))
    visited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("ix_visitors_visited_at", "visited_at"),
        Index("ix_visitors_session", "session_id"),
        Index("ix_visitors_page", "page_url"),
    )


class VisitorEvent(Base):
    __tablename__ = "visitor_events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    visitor_id: Mapped[str] = mapped_column(ForeignKey("visitors.id"), nullable=False)
    event_type: Mapped[Optional[str]] = mapped_column(String(100))
    event_data: Mapped[Optional[dict]] = mapped_column(JSON)
    event_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
