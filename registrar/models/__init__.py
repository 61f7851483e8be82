from registrar.models.company import Company, CompanyStatus
from registrar.models.pre_registration import PreRegistration
from registrar.models.group import Group, GroupMembership
from registrar.models.company_name import CompanyName
from registrar.models.website_settings import WebsiteSettings, WEBSITE_SETTINGS_KEY

__all__ = [
    "Company",
    "CompanyStatus",
    "PreRegistration",
    "Group",
    "GroupMembership",
    "CompanyName",
    "WebsiteSettings",
    "WEBSITE_SETTINGS_KEY",
]
