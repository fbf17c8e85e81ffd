"""
Employee Roster Module

Paginated, searchable view over the employee directory. The pagination
cursor lives on the roster object itself.
"""

from typing import List, Optional

from attendit.domain.entities import Employee
from attendit.domain.repositories import EmployeeDirectory
from attendit.infrastructure.logger import get_logger

logger = get_logger("EmployeeRoster")

DEFAULT_PAGE_SIZE = 20


class EmployeeRoster:
    """Accumulates pages of employees for browsing and editing."""

    def __init__(self, directory: EmployeeDirectory, page_size: int = DEFAULT_PAGE_SIZE):
        self._directory = directory
        self.page_size = page_size
        self.employees: List[Employee] = []
        self.search_query = ""
        self.current_page = 0
        self.has_more = True
        self.is_loading = False
        self._cursor: Optional[str] = None

    async def load(self, refresh: bool = False) -> List[Employee]:
        """
        Fetch the next page, or the first page again when refresh is set.

        Returns the accumulated employee list. Does nothing while another
        load is in flight.
        """
        if self.is_loading:
            return self.employees

        self.is_loading = True
        try:
            if refresh:
                self._cursor = None
                self.employees = []
                self.current_page = 0
                self.has_more = True

            page = await self._directory.page(
                self.page_size,
                self._cursor,
                self.search_query or None
            )
            self._cursor = page.cursor
            self.employees = page.employees if refresh else self.employees + page.employees
            self.has_more = page.has_more
            self.current_page = 1 if refresh else self.current_page + 1
            logger.debug(
                f"Roster page {self.current_page} loaded: {len(page.employees)} employees"
            )
        finally:
            self.is_loading = False
        return self.employees

    async def load_more(self) -> List[Employee]:
        """Fetch the next page if there is one."""
        if not self.has_more or self.is_loading:
            return self.employees
        return await self.load(refresh=False)

    async def search(self, query: str) -> List[Employee]:
        """Restart pagination with a new search query."""
        self.search_query = query
        return await self.load(refresh=True)

    async def add_employee(self, employee: Employee) -> Employee:
        """Add an employee and reload the first page."""
        stored = await self._directory.add(employee)
        logger.info(f"Added employee {stored.id}")
        await self.load(refresh=True)
        return stored

    async def update_employee(self, employee_id: str, **changes) -> Employee:
        """Update an employee and patch the loaded list in place."""
        updated = await self._directory.update(employee_id, **changes)
        self.employees = [
            updated if emp.id == employee_id else emp for emp in self.employees
        ]
        return updated

    async def delete_employee(self, employee_id: str) -> None:
        """Delete an employee and drop it from the loaded list."""
        await self._directory.delete(employee_id)
        self.employees = [emp for emp in self.employees if emp.id != employee_id]
        logger.info(f"Deleted employee {employee_id}")

    def reset(self) -> None:
        self.employees = []
        self.search_query = ""
        self.current_page = 0
        self.has_more = True
        self.is_loading = False
        self._cursor = None
