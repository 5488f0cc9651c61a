"""
Choice enums shared by COGS models, services and serializers.
"""
from django.db import models
from django.utils.translation import gettext_lazy as _


class ChangeType(models.TextChoices):
    """Direction of a recorded price change."""
    INCREASE = "increase", _("Increase")
    DECREASE = "decrease", _("Decrease")
    NO_CHANGE = "no_change", _("No Change")


class BulkPriceMode(models.TextChoices):
    """How bulk base-price adjustment derives the new selling price."""
    SET = "set", _("Set to value")
    INCREASE_PERCENT = "increase_percent", _("Increase by percent")
    DECREASE_PERCENT = "decrease_percent", _("Decrease by percent")
    INCREASE_AMOUNT = "increase_amount", _("Increase by amount")
    DECREASE_AMOUNT = "decrease_amount", _("Decrease by amount")


class ChannelPricingMethod(models.TextChoices):
    """How bulk channel pricing derives a channel price."""
    MARKUP = "markup", _("Markup on selling price")
    PROFIT = "profit", _("Target profit after commission")


class RoundingOption(models.TextChoices):
    """Rounding applied to computed channel prices."""
    NONE = "none", _("Nearest integer")
    HUNDRED = "hundred", _("Nearest hundred")
    THOUSAND = "thousand", _("Nearest thousand")
    CUSTOM = "custom", _("Custom increment")
