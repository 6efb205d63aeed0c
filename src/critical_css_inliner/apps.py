"""Django app configuration for critical-css-inliner."""

from django.apps import AppConfig


class CriticalCSSInlinerConfig(AppConfig):
    name = "critical_css_inliner"
    verbose_name = "Critical CSS Inliner"
