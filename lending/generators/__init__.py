"""Sample-data generators for the lending back office."""

from lending.generators.customer import CustomerGenerator
from lending.generators.patterns import PaymentBehavior
from lending.generators.terms import LoanTermsGenerator

__all__ = ["CustomerGenerator", "LoanTermsGenerator", "PaymentBehavior"]
