"""Call-to-action, call-me and hire-me banners."""

from backoffice.services.base import EntityService, ReferenceSpec, SingletonService


class CallToActionService(SingletonService):
    table = "call_to_actions"
    label = "call to action"
    multilingual_fields = ("title", "subtitle", "description")


class CallmeBannerService(SingletonService):
    table = "callme_banners"
    label = "callme banner"
    multilingual_fields = ("title", "subtitle", "description")


class HireMeBannerService(SingletonService):
    table = "hire_me_banners"
    label = "hire me banner"
    multilingual_fields = ("title",)
    date_fields = ("free_date",)


class CallmeBannerItemService(EntityService):
    table = "callme_banner_items"
    label = "callme banner item"
    multilingual_fields = ("title", "subtitle")
    search_fields = ("title", "subtitle")
    filter_fields = {"banner_id": "banner_id"}
    references = (
        ReferenceSpec("banner_id", "callme_banners", "Invalid callme banner ID"),
    )
