"""
Global fixtures live here

A small company object graph mixing pydantic models, dataclasses, lists,
tuples, dicts and numpy arrays, and a Runtime that keeps its settings in a
temporary directory.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field
import pytest

from pathwalk.core.runtime import build_runtime, Runtime


class Address(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    street: str
    city: str
    zip_code: str | None = None


@dataclass
class Employee:
    first_name: str
    last_name: str
    address: Address | None = None
    extra_info: dict[Any, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Department(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    manager: Employee | None = None
    employees: list[Employee] = Field(default_factory=list)
    quarterly_sales: np.ndarray | None = None
    tags: tuple[str, ...] = ()


class Company(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    departments: list[Department] = Field(default_factory=list)
    ticker_symbols: np.ndarray | None = None
    lookups: dict[Any, Any] = Field(default_factory=dict)

    @computed_field
    @property
    def department_count(self) -> int:
        return len(self.departments)


@pytest.fixture
def company() -> Company:
    """
    ACME with two departments. Sales (managed by John Smith) has quarterly
    figures for two years; IT has no manager.
    """
    smith = Employee(
        first_name="John",
        last_name="Smith",
        address=Address(street="Main Street 1", city="Amsterdam", zip_code="1011"),
        extra_info={
            None: "nothing",
            "https://www.example.com/": "homepage",
            "deep": {"stuff": {"e": "mc2"}},
        },
    )
    jones = Employee(first_name="Mary", last_name="Jones")
    doe = Employee(
        first_name="Jane",
        last_name="Doe",
        address=Address(street="Side Street 2", city="Leiden"),
    )
    sales = Department(
        name="Sales",
        manager=smith,
        employees=[smith, jones],
        quarterly_sales=np.array([[1.5, 2.0, 3.25, 4.0], [5.0, 6.5, 7.5, 8.0]]),
        tags=("east", "west"),
    )
    it = Department(name="IT", employees=[doe])
    return Company(
        name="ACME",
        departments=[sales, it],
        ticker_symbols=np.array(["ACME", "ACM"]),
        lookups={"codes": {"nl": "Netherlands"}, "empty": None},
    )


@pytest.fixture
def test_runtime(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Runtime:
    """
    Creates a temporary Runtime for testing
    """
    monkeypatch.delenv("PATHWALK_STRICT", raising=False)
    monkeypatch.delenv("PATHWALK_SETTINGS_DIR", raising=False)
    rt = build_runtime(settings_dir=tmp_path / "settings", verbose=False)
    # return the runtime to the test
    yield rt
