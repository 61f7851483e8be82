"""
Registration test factories.

Generate request payloads for the registration endpoints and services.

Usage:
    payload = PreRegistrationFactory(code="1234")
    payloads = CompanyNameFactory.create_batch(5)
"""

import factory
from faker import Faker

fake = Faker()


class PreRegistrationFactory(factory.Factory):
    """Payload for POST /pre-register."""

    class Meta:
        model = dict

    name = factory.LazyFunction(fake.name)
    mobile_number = factory.LazyFunction(lambda: fake.numerify("05########"))
    company_name = factory.LazyFunction(fake.company)
    code = factory.LazyFunction(lambda: fake.numerify("%###"))


class CompanyRegistrationFactory(factory.Factory):
    """Payload for POST /companies."""

    class Meta:
        model = dict

    name = factory.LazyFunction(fake.company)
    phone_number = factory.LazyFunction(lambda: fake.numerify("05########"))
    address = factory.LazyFunction(fake.street_address)
    email = factory.LazyFunction(lambda: fake.email().lower())
    business_type = factory.LazyFunction(
        lambda: fake.random_element(["retail", "services", "manufacturing"])
    )
    description = factory.LazyFunction(fake.sentence)


class GroupFactory(factory.Factory):
    """Payload for POST /groups."""

    class Meta:
        model = dict

    name = factory.Sequence(lambda n: f"Group {n + 1}")
    time_from = "09:00"
    time_to = "12:00"
    date = factory.LazyFunction(lambda: fake.date_this_year().isoformat())
    day = factory.LazyFunction(fake.day_of_week)
    max_companies = 0


class CompanyNameFactory(factory.Factory):
    """Payload for POST /company-names."""

    class Meta:
        model = dict

    name = factory.Sequence(lambda n: f"{fake.company()} #{n}")
    contact_name = factory.LazyFunction(fake.name)
    mobile_number = factory.LazyFunction(lambda: fake.numerify("05########"))
    notes = ""
