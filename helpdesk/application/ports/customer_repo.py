"""Port interface for customer persistence."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.customer import Customer


class CustomerRepository(ABC):
    @abstractmethod
    async def save(self, customer: Customer) -> Customer:
        """Insert a new customer.

        Raises DuplicateIdentifierError if the id is already taken.
        """
        ...

    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Customer | None:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Customer | None:
        ...
