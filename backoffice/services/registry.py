"""
Service registry.

Builds every domain service over one gateway and one object storage and
exposes them by resource name for the API layer.
"""

from typing import Dict, Type

import structlog

from backoffice.gateway.base import ObjectStorage, QueryGateway
from backoffice.services import (
    articles,
    banners,
    certificates,
    contact,
    content,
    experience,
    offerings,
    pricing,
    projects,
    skills,
    testimonials,
    websettings,
)
from backoffice.services.base import EntityService, SingletonService
from backoffice.services.visitors import VisitorService

logger = structlog.get_logger(__name__)


ENTITY_SERVICES: Dict[str, Type[EntityService]] = {
    "article-categories": articles.ArticleCategoryService,
    "article-tags": articles.ArticleTagService,
    "articles": articles.ArticleService,
    "skill-categories": skills.SkillCategoryService,
    "skills": skills.SkillService,
    "experience-categories": experience.ExperienceCategoryService,
    "experiences": experience.ExperienceService,
    "projects": projects.ProjectService,
    "certificates": certificates.CertificateService,
    "service-benefits": offerings.ServiceBenefitService,
    "featured-services": offerings.FeaturedServiceService,
    "process-activities": offerings.ProcessActivityService,
    "service-processes": offerings.ServiceProcessService,
    "promise-items": offerings.PromiseItemService,
    "faqs": offerings.FaqService,
    "brands": offerings.BrandService,
    "tech-stack-skills": offerings.TechStackSkillService,
    "tech-stacks": offerings.TechStackService,
    "package-benefits": pricing.PackageBenefitService,
    "package-exclusions": pricing.PackageExclusionService,
    "package-pricing": pricing.PackagePricingService,
    "testimonial-categories": testimonials.TestimonialCategoryService,
    "testimonials": testimonials.TestimonialService,
    "callme-banner-items": banners.CallmeBannerItemService,
    "contact-forms": contact.ContactFormService,
    "social-media": websettings.SocialMediaService,
}

SINGLETON_SERVICES: Dict[str, Type[SingletonService]] = {
    "about": content.AboutService,
    "home-hero": content.HomeHeroService,
    "service-hero": content.ServiceHeroService,
    "privacy-policy": content.PrivacyPolicyService,
    "terms-of-service": content.TermsOfServiceService,
    "cookie-policy": content.CookiePolicyService,
    "call-to-action": banners.CallToActionService,
    "callme-banner": banners.CallmeBannerService,
    "hire-me-banner": banners.HireMeBannerService,
    "contact": contact.ContactService,
    "web-setting": websettings.WebSettingService,
}


class ServiceRegistry:
    """All services sharing one gateway and one storage."""

    def __init__(self, gateway: QueryGateway, storage: ObjectStorage) -> None:
        self.gateway = gateway
        self.storage = storage
        self.entities: Dict[str, EntityService] = {
            name: cls(gateway, storage) for name, cls in ENTITY_SERVICES.items()
        }
        self.singletons: Dict[str, SingletonService] = {
            name: cls(gateway, storage) for name, cls in SINGLETON_SERVICES.items()
        }
        self.visitors = VisitorService(gateway)
        logger.info(
            "Service registry built",
            entities=len(self.entities),
            singletons=len(self.singletons),
        )

    def entity(self, name: str) -> EntityService:
        return self.entities[name]

    def singleton(self, name: str) -> SingletonService:
        return self.singletons[name]

    def __getattr__(self, name: str):
        # registry.articles, registry.service_processes, registry.about ...
        key = name.replace("_", "-")
        for services in (self.__dict__.get("entities", {}), self.__dict__.get("singletons", {})):
            if key in services:
                return services[key]
        raise AttributeError(name)
