from django import forms

from donations.models import AppSetting


class AppSettingForm(forms.ModelForm):
    """Branding & theme colours (#RRGGBB)"""

    class Meta:
        model = AppSetting
        fields = [
            'app_title', 'logo_url', 'favicon_url',
            'primary_color', 'secondary_color', 'background_color',
            'text_color', 'sidebar_color',
        ]
