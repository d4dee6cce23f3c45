"""Singleton page content: about, heroes, policies."""

from backoffice.services.base import AssetSpec, SingletonService


class AboutService(SingletonService):
    table = "abouts"
    label = "about"
    multilingual_fields = ("title", "subtitle", "description")
    asset_fields = {
        "image": AssetSpec("about"),
        "title_image": AssetSpec("about"),
        "subtitle_image": AssetSpec("about"),
    }


class HomeHeroService(SingletonService):
    table = "home_heros"
    label = "home hero"
    multilingual_fields = ("title", "subtitle", "description")
    asset_fields = {"image": AssetSpec("home-hero")}


class ServiceHeroService(SingletonService):
    table = "service_heroes"
    label = "service hero"
    multilingual_fields = ("title", "subtitle", "description")
    asset_fields = {"icon": AssetSpec("service-hero", allow_icon_class=True)}


class PrivacyPolicyService(SingletonService):
    table = "privacy_policies"
    label = "privacy policy"
    multilingual_fields = ("title", "description")


class TermsOfServiceService(SingletonService):
    table = "terms_of_service"
    label = "terms of service"
    multilingual_fields = ("title", "description")


class CookiePolicyService(SingletonService):
    table = "cookie_policies"
    label = "cookie policy"
    multilingual_fields = ("title", "description")
