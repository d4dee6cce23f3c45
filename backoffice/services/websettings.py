"""Site-wide settings and social media links."""

from backoffice.services.base import AssetSpec, EntityService, SingletonService


class WebSettingService(SingletonService):
    table = "web_settings"
    label = "web setting"
    multilingual_fields = ("title_website",)
    asset_fields = {
        "logo": AssetSpec("web-setting"),
        "favicon": AssetSpec("web-setting", image=False),
        "cv": AssetSpec("web-setting", image=False),
        "portfolio": AssetSpec("web-setting", image=False),
    }


class SocialMediaService(EntityService):
    table = "social_media"
    label = "social media"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    url_fields = {"link": "Invalid social media link URL"}
    asset_fields = {"icon": AssetSpec("social-media", allow_icon_class=True)}
